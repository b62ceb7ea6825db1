"""
Autonomous Proposal Pipeline

Job handlers for proposal generation:

generate-autonomous-proposal (app/generate-autonomous-proposal)
    research -> qualify -> strategize -> draft -> red team (+ revisions)
    -> humanize -> finalize, with every stage a durable step and every
    status change checked against the proposal state machine.

generate-tender-proposal (app/generate-proposal)
    single-shot long-form draft tracked in the jobs collection.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from bidguard.agents import (
    ResearcherAgent,
    QualifierAgent,
    StrategistAgent,
    CriticAgent,
    WriterAgent,
    HumanizerAgent,
)
from bidguard.agents.critic import fallback_critique
from bidguard.config import settings
from bidguard.domain.constants import (
    ProposalStatus,
    JobStatus,
    Strategy,
    CritiqueStatus,
    Recommendation,
    EVENT_GENERATE_AUTONOMOUS_PROPOSAL,
    EVENT_GENERATE_PROPOSAL,
)
from bidguard.domain.errors import AgentError, InvalidTransitionError, NonRetriableError
from bidguard.infra.mongodb.repositories.proposal_repo import (
    ProposalRepository,
    GenerationJobRepository,
    get_proposal_repo,
    get_job_repo,
)
from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository, get_profile_repo
from bidguard.infra.mongodb.repositories.tender_repo import TenderRepository, get_tender_repo
from bidguard.jobs.events import Event, AutonomousProposalRequested, ProposalJobRequested
from bidguard.jobs.registry import FunctionRegistry
from bidguard.jobs.steps import Step
from bidguard.models.agent_outputs import ResearchOutput
from bidguard.services.audit_service import AuditService, get_audit_service
from bidguard.services.tender_service import format_tender_summary, format_company_profile

logger = logging.getLogger(__name__)

STRATEGY_ORDER: List[Strategy] = [Strategy.SAFE, Strategy.INNOVATIVE, Strategy.DISRUPTIVE]


def failure_markdown(error: Any) -> str:
    return f"## Generation Failed\n\nSystem encountered an error during processing: {error}"


def select_strategy(candidates: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Pick the candidate with the highest critique score.
    Ties go to the earlier entry of STRATEGY_ORDER.
    """
    order = {s.value: i for i, s in enumerate(STRATEGY_ORDER)}
    return max(
        candidates,
        key=lambda c: (c["critique"]["score"], -order.get(c["strategy_name"], len(order))),
    )


class AutonomousProposalPipeline:
    """Runs the multi-agent generation workflow for one proposal."""

    def __init__(
        self,
        proposal_repo: Optional[ProposalRepository] = None,
        tender_repo: Optional[TenderRepository] = None,
        profile_repo: Optional[ProfileRepository] = None,
        audit_service: Optional[AuditService] = None,
        researcher: Optional[ResearcherAgent] = None,
        qualifier: Optional[QualifierAgent] = None,
        strategist: Optional[StrategistAgent] = None,
        critic: Optional[CriticAgent] = None,
        writer: Optional[WriterAgent] = None,
        humanizer: Optional[HumanizerAgent] = None,
    ):
        self.proposals = proposal_repo or get_proposal_repo()
        self.tenders = tender_repo or get_tender_repo()
        self.profiles = profile_repo or get_profile_repo()
        self.audit = audit_service or get_audit_service()
        self.researcher = researcher or ResearcherAgent()
        self.qualifier = qualifier or QualifierAgent()
        self.strategist = strategist or StrategistAgent()
        self.critic = critic or CriticAgent()
        self.writer = writer or WriterAgent()
        self.humanizer = humanizer or HumanizerAgent()

    # ===================== STATUS =====================

    def _transition(self, proposal_id: str, status: ProposalStatus, **fields) -> str:
        """
        Apply a status change. A proposal already in the target status is
        treated as done (the step is being replayed); any other illegal
        move fails the run without retries.
        """
        try:
            self.proposals.transition(proposal_id, status.value, **fields)
        except InvalidTransitionError as e:
            if e.current == status.value:
                logger.info(f"[Pipeline] {proposal_id} already {status.value}")
                return status.value
            raise NonRetriableError(str(e)) from e
        return status.value

    # ===================== STAGES =====================

    def _research(self, data: AutonomousProposalRequested) -> Dict[str, Any]:
        research = self.researcher.run(data.tender_title, data.tender_buyer or "Unknown Client")
        output = research.model_dump(mode="json")
        self.proposals.save_fields(data.proposal_id, research=output)
        return output

    def _qualify(self, data: AutonomousProposalRequested) -> Dict[str, Any]:
        tender = self.tenders.get(data.tender_id) or {
            "title": data.tender_title,
            "buyer": data.tender_buyer,
            "description": f"Reference: {data.tender_id}",
        }
        tender_summary = format_tender_summary(tender)
        company_profile = format_company_profile(self.profiles.get_by_user_id(data.user_id))
        result = self.qualifier.run(tender_summary, company_profile, "No history available")
        if result.recommendation == Recommendation.NO_GO:
            logger.warning(f"[Pipeline] {data.proposal_id} qualified NO-GO, continuing (advisory only)")
        output = result.model_dump(mode="json")
        self.proposals.save_fields(data.proposal_id, qualification=output)
        return output

    def _critique_or_fallback(self, strategy_name: str, project_name: str, content: str) -> Dict[str, Any]:
        try:
            critique = self.critic.run(strategy_name, project_name, content)
        except AgentError as e:
            logger.warning(f"[RedTeam] Using fallback critique for {strategy_name}: {e}")
            critique = fallback_critique(content)
        return critique.model_dump(mode="json")

    def _strategize(self, data: AutonomousProposalRequested, research_summary: str) -> Dict[str, Any]:
        client_name = data.tender_buyer or "Unknown Client"

        def draft(strategy: Strategy) -> Dict[str, Any]:
            result = self.strategist.run(
                strategy.value,
                data.tender_title,
                client_name,
                research_summary,
                idea_injection=data.idea_injection or "",
            )
            candidate = result.model_dump(mode="json")
            candidate["critique"] = self._critique_or_fallback(
                strategy.value, data.tender_title, result.executive_summary
            )
            return candidate

        with ThreadPoolExecutor(max_workers=len(STRATEGY_ORDER)) as executor:
            candidates = list(executor.map(draft, STRATEGY_ORDER))

        selected = select_strategy(candidates)
        logger.info(
            f"[Pipeline] {data.proposal_id} selected {selected['strategy_name']} "
            f"({selected['critique']['score']}/10)"
        )
        self.proposals.save_fields(
            data.proposal_id,
            strategies=candidates,
            selected_strategy=selected["strategy_name"],
        )
        return {"strategies": candidates, "selected": selected}

    def _draft(self, data: AutonomousProposalRequested, selected: Dict[str, Any], research_summary: str) -> str:
        content = self.writer.run(
            strategy_name=selected["strategy_name"],
            original_summary=selected["executive_summary"],
            project_name=data.tender_title,
            client_name=data.tender_buyer or "Unknown Client",
            research_summary=research_summary,
        )
        self.proposals.save_fields(data.proposal_id, draft_content=content)
        return content

    def _red_team(self, data: AutonomousProposalRequested, strategy_name: str, content: str) -> Dict[str, Any]:
        critique = self._critique_or_fallback(strategy_name, data.tender_title, content)
        self.proposals.update_one(
            {"proposal_id": data.proposal_id},
            {
                "$push": {"critiques": critique},
                "$set": {"score": critique["score"], "feedback": critique["harsh_feedback"]},
            },
        )
        return critique

    def _revise(self, data: AutonomousProposalRequested, content: str, critique: Dict[str, Any]) -> str:
        revised = self.writer.revise(content, critique)
        self.proposals.save_fields(data.proposal_id, draft_content=revised)
        return revised

    def _finalize(self, data: AutonomousProposalRequested, final_content: str, critique: Dict[str, Any]) -> Dict[str, Any]:
        self._transition(
            data.proposal_id,
            ProposalStatus.COMPLETE,
            final_content=final_content,
            score=critique["score"],
            feedback=critique["harsh_feedback"],
            error=None,
        )
        self.audit.log_proposal_completed(data.user_id, data.proposal_id, critique["score"])
        return {"proposal_id": data.proposal_id, "score": critique["score"]}

    # ===================== HANDLER =====================

    def handle(self, event: Event, step: Step) -> Dict[str, Any]:
        data = AutonomousProposalRequested(**event.data)
        pid = data.proposal_id
        logger.info(f"[Pipeline] Starting autonomous generation for {pid}: {data.tender_title}")

        step.run("start-research", self._transition, pid, ProposalStatus.RESEARCHING)
        research = step.run("research", self._research, data)
        step.run("qualify", self._qualify, data)
        research_pack = ResearchOutput(**research)
        research_summary = research_pack.summary(data.idea_injection)

        step.run("start-strategizing", self._transition, pid, ProposalStatus.STRATEGIZING)
        strategies = step.run("strategize", self._strategize, data, research_pack.summary())
        selected = strategies["selected"]

        step.run("start-drafting", self._transition, pid, ProposalStatus.DRAFTING)
        content = step.run("draft", self._draft, data, selected, research_summary)

        max_rounds = max(0, settings.MAX_REVISION_ROUNDS)
        critique: Dict[str, Any] = {}
        for round_no in range(max_rounds + 1):
            step.run(f"start-critique-{round_no}", self._transition, pid, ProposalStatus.CRITIQUING)
            critique = step.run(f"red-team-{round_no}", self._red_team, data, selected["strategy_name"], content)
            if critique["status"] == CritiqueStatus.ACCEPT.value or round_no == max_rounds:
                break
            logger.info(f"[Pipeline] {pid} rejected at {critique['score']}/10, revision round {round_no + 1}")
            step.run(f"start-revision-{round_no}", self._transition, pid, ProposalStatus.DRAFTING)
            content = step.run(f"revise-{round_no}", self._revise, data, content, critique)

        step.run("start-humanizing", self._transition, pid, ProposalStatus.HUMANIZING)
        humanized = step.run("humanize", lambda: self.humanizer.run(content).model_dump(mode="json"))

        result = step.run("finalize", self._finalize, data, humanized["refined_text"], critique)
        logger.info(f"[Pipeline] {pid} complete with score {result['score']}/10")
        return result

    def on_failure(self, event: Event, error: BaseException) -> None:
        """Mark the proposal failed and give the user their credit back."""
        proposal_id = event.data.get("proposal_id")
        user_id = event.data.get("user_id")
        logger.error(f"[Pipeline] Generation failed for {proposal_id}: {error}")
        if not proposal_id:
            return
        if self.proposals.mark_failed(proposal_id, str(error)) and user_id:
            self.profiles.refund_credit(user_id)


class ProposalJobHandler:
    """Single-shot long-form writer job tracked in the jobs collection."""

    def __init__(self, job_repo: Optional[GenerationJobRepository] = None, writer: Optional[WriterAgent] = None):
        self.jobs = job_repo or get_job_repo()
        self.writer = writer or WriterAgent()

    def _write(self, data: ProposalJobRequested) -> str:
        return self.writer.write_long_form(
            strategy_name=data.strategy_name,
            original_summary=data.executive_summary,
            project_name=data.project_name,
            client_name=data.client_name,
            research_summary=data.research_summary,
        )

    def handle(self, event: Event, step: Step) -> Dict[str, Any]:
        data = ProposalJobRequested(**event.data)
        step.run("mark-processing", self.jobs.set_status, data.job_id, JobStatus.PROCESSING.value)
        content = step.run("write-proposal", self._write, data)
        step.run("mark-completed", self.jobs.set_status, data.job_id, JobStatus.COMPLETED.value, content)
        logger.info(f"[Jobs] Proposal job {data.job_id} completed ({len(content.split())} words)")
        return {"job_id": data.job_id, "status": JobStatus.COMPLETED.value}

    def on_failure(self, event: Event, error: BaseException) -> None:
        job_id = event.data.get("job_id")
        logger.error(f"[Jobs] Proposal job {job_id} failed: {error}")
        if job_id:
            self.jobs.set_status(job_id, JobStatus.FAILED.value, failure_markdown(error))


_pipeline: Optional[AutonomousProposalPipeline] = None
_job_handler: Optional[ProposalJobHandler] = None


def get_pipeline() -> AutonomousProposalPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = AutonomousProposalPipeline()
    return _pipeline


def get_job_handler() -> ProposalJobHandler:
    global _job_handler
    if _job_handler is None:
        _job_handler = ProposalJobHandler()
    return _job_handler


def register_functions(
    registry: FunctionRegistry,
    pipeline: Optional[AutonomousProposalPipeline] = None,
    job_handler: Optional[ProposalJobHandler] = None,
) -> FunctionRegistry:
    """Register the proposal job functions. Handlers are built on first use unless given."""

    def run_pipeline(event: Event, step: Step):
        return (pipeline or get_pipeline()).handle(event, step)

    def pipeline_failed(event: Event, error: BaseException):
        (pipeline or get_pipeline()).on_failure(event, error)

    def run_job(event: Event, step: Step):
        return (job_handler or get_job_handler()).handle(event, step)

    def job_failed(event: Event, error: BaseException):
        (job_handler or get_job_handler()).on_failure(event, error)

    registry.function(
        "generate-autonomous-proposal",
        EVENT_GENERATE_AUTONOMOUS_PROPOSAL,
        on_failure=pipeline_failed,
    )(run_pipeline)
    registry.function(
        "generate-tender-proposal",
        EVENT_GENERATE_PROPOSAL,
        on_failure=job_failed,
    )(run_job)
    return registry
