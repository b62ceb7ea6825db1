"""
Centralized Constants for BidGuard

SINGLE SOURCE OF TRUTH for status enums, the proposal state machine,
keyword lists and vocabulary rules. All modules should import from here.
"""

from typing import Dict, FrozenSet, List, Tuple
from enum import Enum


# =============================================================================
# PROPOSAL STATE MACHINE
# =============================================================================

class ProposalStatus(str, Enum):
    """Lifecycle of an autonomously generated proposal."""
    QUEUED = "queued"
    RESEARCHING = "researching"
    STRATEGIZING = "strategizing"
    DRAFTING = "drafting"
    CRITIQUING = "critiquing"
    HUMANIZING = "humanizing"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: FrozenSet[ProposalStatus] = frozenset({
    ProposalStatus.COMPLETE,
    ProposalStatus.FAILED,
})

# target -> statuses it may be entered from
# (critiquing -> drafting is the red-team revision loop)
ALLOWED_PREDECESSORS: Dict[ProposalStatus, FrozenSet[ProposalStatus]] = {
    ProposalStatus.RESEARCHING: frozenset({ProposalStatus.QUEUED}),
    ProposalStatus.STRATEGIZING: frozenset({ProposalStatus.RESEARCHING}),
    ProposalStatus.DRAFTING: frozenset({ProposalStatus.STRATEGIZING, ProposalStatus.CRITIQUING}),
    ProposalStatus.CRITIQUING: frozenset({ProposalStatus.DRAFTING}),
    ProposalStatus.HUMANIZING: frozenset({ProposalStatus.CRITIQUING}),
    ProposalStatus.COMPLETE: frozenset({ProposalStatus.HUMANIZING}),
    ProposalStatus.FAILED: frozenset(
        s for s in ProposalStatus if s not in (ProposalStatus.COMPLETE, ProposalStatus.FAILED)
    ),
}


def can_transition(current: str, target: str) -> bool:
    """Return True if a proposal in `current` may move to `target`."""
    try:
        current_status = ProposalStatus(current)
        target_status = ProposalStatus(target)
    except ValueError:
        return False
    return current_status in ALLOWED_PREDECESSORS.get(target_status, frozenset())


class JobStatus(str, Enum):
    """Lifecycle of a single-shot proposal writing job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# BID STRATEGY / QUALIFICATION ENUMS
# =============================================================================

class Strategy(str, Enum):
    """Bid strategy archetypes drafted in parallel. Declaration order breaks ties."""
    SAFE = "Safe"
    INNOVATIVE = "Innovative"
    DISRUPTIVE = "Disruptive"


class CritiqueStatus(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class Recommendation(str, Enum):
    GO = "GO"
    NO_GO = "NO-GO"
    CAUTION = "PROCEED WITH CAUTION"


class TrafficLight(str, Enum):
    RED = "RED"
    AMBER = "AMBER"
    GREEN = "GREEN"


class AuditAction(str, Enum):
    PROPOSAL_CREATED = "proposal.created"
    PROPOSAL_COMPLETED = "proposal.completed"
    PROPOSAL_EXPORTED = "proposal.exported"
    PROPOSAL_DELETED = "proposal.deleted"
    PROFILE_UPDATED = "profile.updated"
    TENDER_SAVED = "tender.saved"
    TENDER_REJECTED = "tender.rejected"


class CompanySize(str, Enum):
    MICRO = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    ENTERPRISE = "500+"


# =============================================================================
# EVENT NAMES
# =============================================================================

EVENT_GENERATE_AUTONOMOUS_PROPOSAL = "app/generate-autonomous-proposal"
EVENT_GENERATE_PROPOSAL = "app/generate-proposal"


# =============================================================================
# WRITING RULES
# =============================================================================

# American -> British spelling, enforced on every generated proposal
UK_SPELLINGS: List[Tuple[str, str]] = [
    ("program", "programme"),
    ("mobilization", "mobilisation"),
    ("organization", "organisation"),
    ("color", "colour"),
    ("center", "centre"),
    ("analyze", "analyse"),
    ("optimize", "optimise"),
]

BANNED_WORDS: List[str] = [
    "delve", "comprehensive", "tapestry", "pivotal", "unlock", "synergies",
    "synergy", "leverage", "holistic", "paradigm", "robust", "landscape",
    "unwavering",
]

# Phrases that indicate the model refused or broke character
REFUSAL_PATTERNS: List[str] = [
    "as an ai",
    "i am an ai",
    "i'm an ai",
    "i cannot",
    "i can't",
    "i don't have the ability",
    "i'm not able to",
    "i am unable to",
    "my knowledge cutoff",
    "i don't have access to",
    "i cannot provide",
    "apologize, but i",
]


# =============================================================================
# INDUSTRY CLASSIFICATION KEYWORDS
# =============================================================================
# Keywords of 3 characters or fewer are matched on word boundaries.

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "healthcare": [
        "nhs", "hospital", "clinical", "medical", "health", "pharmacy", "nursing",
        "patient", "care home", "mental health", "ambulance", "gp", "dentist",
        "physiotherapy", "pathology", "radiology", "maternity", "paediatric",
    ],
    "defense": [
        "mod", "ministry of defence", "military", "defence", "defense", "armed forces",
        "army", "navy", "raf", "royal air force", "weapons", "ammunition", "security",
        "intelligence", "surveillance", "nato",
    ],
    "technology": [
        "software", "it ", "i.t.", "digital", "cyber", "data", "cloud", "saas",
        "website", "application", "api", "database", "ai", "artificial intelligence",
        "machine learning", "automation", "network", "infrastructure", "erp", "crm",
    ],
    "construction": [
        "building", "construction", "civil engineering", "architect", "contractor",
        "renovation", "refurbishment", "demolition", "groundwork", "scaffolding",
        "roofing", "plumbing", "electrical installation", "hvac", "mechanical",
    ],
    "education": [
        "school", "university", "college", "education", "learning", "training",
        "academy", "curriculum", "teaching", "student", "pupil", "ofsted",
        "further education", "higher education", "classroom",
    ],
    "transport": [
        "transport", "logistics", "fleet", "vehicle", "bus", "rail", "train",
        "highway", "road", "aviation", "airport", "shipping", "freight",
        "delivery", "courier", "haulage", "taxi",
    ],
    "energy": [
        "energy", "electricity", "gas", "renewable", "solar", "wind", "hydro",
        "nuclear", "grid", "power", "utility", "fuel", "carbon", "emissions",
        "sustainability", "net zero", "green", "ev charging",
    ],
    "finance": [
        "finance", "banking", "insurance", "investment", "pension", "audit",
        "accounting", "payroll", "treasury", "fiscal", "tax", "vat", "hmrc",
    ],
    "legal": [
        "legal", "law", "solicitor", "barrister", "court", "tribunal", "judicial",
        "litigation", "contract", "compliance", "regulatory", "gdpr", "foi",
    ],
    "environment": [
        "environment", "waste", "recycling", "pollution", "climate", "ecology",
        "wildlife", "conservation", "biodiversity", "flood", "drainage", "water",
    ],
    "facilities": [
        "facilities management", "cleaning", "catering", "security", "reception",
        "maintenance", "janitorial", "grounds", "landscaping", "pest control",
    ],
    "social": [
        "social care", "social services", "housing", "homelessness", "children",
        "foster", "adoption", "disability", "elderly", "vulnerable", "community",
    ],
}

INDUSTRY_LABELS: Dict[str, str] = {
    "healthcare": "Healthcare",
    "defense": "Defence",
    "technology": "IT & Digital",
    "construction": "Construction",
    "education": "Education",
    "transport": "Transport & Logistics",
    "energy": "Energy & Utilities",
    "finance": "Finance & Banking",
    "legal": "Legal Services",
    "environment": "Environment",
    "facilities": "Facilities Management",
    "social": "Social Care",
    "general": "General",
}
