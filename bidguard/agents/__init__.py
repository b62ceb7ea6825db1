"""
LLM Agents

Each agent owns one prompt, one output model and its fallback policy.
"""

from bidguard.agents.researcher import ResearcherAgent
from bidguard.agents.qualifier import QualifierAgent
from bidguard.agents.strategist import StrategistAgent
from bidguard.agents.critic import CriticAgent
from bidguard.agents.writer import WriterAgent
from bidguard.agents.humanizer import HumanizerAgent
from bidguard.agents.company_researcher import CompanyResearcherAgent

__all__ = [
    "ResearcherAgent",
    "QualifierAgent",
    "StrategistAgent",
    "CriticAgent",
    "WriterAgent",
    "HumanizerAgent",
    "CompanyResearcherAgent",
]
