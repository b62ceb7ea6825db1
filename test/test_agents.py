"""
Tests for the LLM agents: parsing, normalisation and fallback policies.
"""
import pytest

from bidguard.agents import (
    ResearcherAgent,
    QualifierAgent,
    StrategistAgent,
    CriticAgent,
    WriterAgent,
    HumanizerAgent,
    CompanyResearcherAgent,
)
from bidguard.domain.constants import Recommendation, TrafficLight, CritiqueStatus
from bidguard.domain.errors import AgentError
from bidguard.models.agent_outputs import ResearchOutput, QualificationResult, CritiqueOutput


CRITIQUE = {
    "score": 7.5,
    "status": "ACCEPT",
    "compliance_checklist": [{"item": "Social Value", "status": True}],
    "harsh_feedback": ["Evidence is thin in section 2"],
    "evidence_score": 6,
    "social_value_present": True,
    "annotations": [{"text": "extensive experience", "issue": "Vague", "suggestion": "12 NHS trusts since 2019"}],
}


# ===================== RESEARCHER =====================

def test_researcher_parses_output(scripted_llm):
    llm = scripted_llm(["```json\n" + '{"client_news": "Budget uplift", "competitor_wins": [], '
                        '"pain_points": ["Legacy EPR"], "evidence_bullets": ["40% of trusts"]}' + "\n```"])
    research = ResearcherAgent(llm=llm).run("EPR Replacement", "NHS England")

    assert research.client_news == ["Budget uplift"]
    assert research.pain_points == ["Legacy EPR"]
    assert "NHS England" in llm.prompts[0]


def test_researcher_falls_back(scripted_llm):
    research = ResearcherAgent(llm=scripted_llm([RuntimeError("timeout")])).run("EPR Replacement", "NHS England")
    assert research.client_news[0].startswith("[Fallback]")
    assert research.pain_points


def test_research_summary_includes_idea_injection():
    research = ResearchOutput(client_news=["News A"], evidence_bullets=["Stat B"])
    summary = research.summary("Use our Leeds hub")
    assert "Client News:" in summary
    assert "- Stat B" in summary
    assert "Use our Leeds hub" in summary
    assert ResearchOutput().summary() == "No research available."


# ===================== QUALIFIER =====================

def test_qualifier_normalises_chatty_output(scripted_llm):
    llm = scripted_llm([{
        "recommendation": "Recommendation: GO",
        "confidence_score": "82.6",
        "traffic_light": "GREEN (strong fit)",
        "reasoning": "Sector match",
        "strategic_advice": "Lead with cyber credentials.",
    }])
    result = QualifierAgent(llm=llm).run("Tender", "Profile", "None")

    assert result.recommendation == Recommendation.GO
    assert result.confidence_score == 83
    assert result.traffic_light == TrafficLight.GREEN
    assert result.reasoning == ["Sector match"]


def test_qualifier_red_wins_over_other_lights(scripted_llm):
    llm = scripted_llm([{"recommendation": "NO-GO", "confidence_score": 20, "traffic_light": "RED...AMBER...GREEN"}])
    result = QualifierAgent(llm=llm).run("Tender", "Profile")
    assert result.recommendation == Recommendation.NO_GO
    assert result.traffic_light == TrafficLight.RED


def test_qualifier_unparseable_output(scripted_llm):
    result = QualifierAgent(llm=scripted_llm(["I think you should bid."])).run("Tender", "Profile")
    assert result.recommendation == Recommendation.CAUTION
    assert result.confidence_score == 50
    assert result.traffic_light == TrafficLight.AMBER
    assert result.reasoning == ["Manual review recommended"]


def test_qualifier_system_error(scripted_llm):
    result = QualifierAgent(llm=scripted_llm([RuntimeError("down")])).run("Tender", "Profile")
    assert result.recommendation == Recommendation.CAUTION
    assert result.confidence_score == 0
    assert result.traffic_light == TrafficLight.AMBER


# ===================== STRATEGIST =====================

def test_strategist_forces_strategy_name(scripted_llm):
    llm = scripted_llm([{
        "strategy_name": "Something else",
        "executive_summary": "Proven delivery",
        "key_theme": "Reliability",
        "strengths": ["Low risk"],
        "weaknesses": [],
    }])
    draft = StrategistAgent(llm=llm).run("Safe", "EPR", "NHS", "research", idea_injection="Reuse our FHIR adapters")

    assert draft.strategy_name == "Safe"
    assert draft.executive_summary == "Proven delivery"
    assert "Reuse our FHIR adapters" in llm.prompts[0]
    assert "write a Safe bid proposal strategy" in llm.prompts[0]


def test_strategist_fallback(scripted_llm):
    draft = StrategistAgent(llm=scripted_llm(["not json"])).run("Disruptive", "EPR", "NHS", "research")
    assert draft.strategy_name == "Disruptive"
    assert draft.key_theme == "Challenger Transformation"


def test_strategist_rejects_unknown_strategy(scripted_llm):
    with pytest.raises(ValueError):
        StrategistAgent(llm=scripted_llm(["{}"])).run("Reckless", "EPR", "NHS", "research")


# ===================== CRITIC =====================

def test_critic_recomputes_status_from_score(scripted_llm):
    critique = CriticAgent(llm=scripted_llm([CRITIQUE])).run("Safe", "EPR", "one two three")

    assert critique.score == 7.5
    assert critique.status == CritiqueStatus.REJECT
    assert critique.word_count == 3
    assert critique.annotations[0].suggestion == "12 NHS trusts since 2019"


def test_critic_clamps_score_and_accepts(scripted_llm):
    critique = CriticAgent(llm=scripted_llm([dict(CRITIQUE, score=14, status="REJECT")])).run("Safe", "EPR", "text")
    assert critique.score == 10.0
    assert critique.status == CritiqueStatus.ACCEPT


def test_critic_accept_threshold_is_inclusive(scripted_llm):
    critique = CriticAgent(llm=scripted_llm([dict(CRITIQUE, score=8.5)])).run("Safe", "EPR", "text")
    assert critique.status == CritiqueStatus.ACCEPT


def test_critic_includes_rfp_context(scripted_llm):
    llm = scripted_llm([CRITIQUE])
    CriticAgent(llm=llm).run("Safe", "EPR", "text", rfp="Must hold ISO 9001")
    assert "Must hold ISO 9001" in llm.prompts[0]


def test_critic_truncates_long_content(scripted_llm):
    llm = scripted_llm([CRITIQUE])
    CriticAgent(llm=llm).run("Safe", "EPR", "x " * 4500 + "TAIL_MARKER")
    assert "TAIL_MARKER" not in llm.prompts[0]


def test_critic_raises_on_unusable_output(scripted_llm):
    with pytest.raises(AgentError):
        CriticAgent(llm=scripted_llm(['{"status": "ACCEPT"}'])).run("Safe", "EPR", "text")
    with pytest.raises(AgentError):
        CriticAgent(llm=scripted_llm([RuntimeError("down")])).run("Safe", "EPR", "text")


# ===================== WRITER =====================

def test_writer_enforces_uk_spelling(scripted_llm):
    llm = scripted_llm(["# EXECUTIVE SUMMARY\nOur program mobilization starts day one."])
    text = WriterAgent(llm=llm).run("Safe", "Proven delivery", "EPR", "NHS", "research")

    assert text == "# EXECUTIVE SUMMARY\nOur programme mobilisation starts day one."
    assert "EXECUTIVE SUMMARY" in llm.prompts[0]
    assert "SOCIAL VALUE" in llm.prompts[0]
    assert "COMMERCIALS" in llm.prompts[0]


def test_writer_retries_refusals(scripted_llm):
    llm = scripted_llm(["As an AI, I cannot pretend to be a company.", "# EXECUTIVE SUMMARY\nDelivered."])
    text = WriterAgent(llm=llm).run("Safe", "Proven delivery", "EPR", "NHS", "research")
    assert text == "# EXECUTIVE SUMMARY\nDelivered."
    assert llm.calls == 2


def test_writer_raises_agent_error(scripted_llm):
    with pytest.raises(AgentError):
        WriterAgent(llm=scripted_llm([RuntimeError("down")])).run("Safe", "x", "EPR", "NHS", "research")
    with pytest.raises(AgentError):
        WriterAgent(llm=scripted_llm(["As an AI, I cannot do this."])).run("Safe", "x", "EPR", "NHS", "research")


def test_writer_revision_includes_feedback(scripted_llm):
    llm = scripted_llm(["Revised draft"])
    text = WriterAgent(llm=llm).revise("Old draft", CRITIQUE)

    assert text == "Revised draft"
    assert "Old draft" in llm.prompts[0]
    assert "Evidence is thin in section 2" in llm.prompts[0]
    assert "12 NHS trusts since 2019" in llm.prompts[0]


def test_writer_long_form(scripted_llm):
    llm = scripted_llm(["# Executive Summary\nLong form"])
    text = WriterAgent(llm=llm).write_long_form("Innovative", "Pitch", "EPR", "NHS", "research")
    assert text.startswith("# Executive Summary")
    assert "1500-2000 words" in llm.prompts[0]


# ===================== HUMANIZER =====================

def test_humanizer_applies_uk_spelling(scripted_llm):
    llm = scripted_llm([{"refined_text": "A calmer program.", "changes_made": "Removed delve"}])
    output = HumanizerAgent(llm=llm).run("A program.")
    assert output.refined_text == "A calmer programme."
    assert output.changes_made == ["Removed delve"]


def test_humanizer_returns_original_on_failure(scripted_llm):
    output = HumanizerAgent(llm=scripted_llm([RuntimeError("down")])).run("Original text")
    assert output.refined_text == "Original text"
    assert output.changes_made == ["Failed to humanize, returned original"]

    output = HumanizerAgent(llm=scripted_llm(["no json"])).run("Original text")
    assert output.refined_text == "Original text"


# ===================== COMPANY RESEARCH =====================

def test_company_researcher(scripted_llm):
    llm = scripted_llm(["Acme Digital Ltd is a cloud consultancy."])
    bio = CompanyResearcherAgent(llm=llm).run("Acme Digital Ltd", "https://acme.example")
    assert bio == "Acme Digital Ltd is a cloud consultancy."
    assert "https://acme.example" in llm.prompts[0]
    assert "No description provided" in llm.prompts[0]


def test_company_researcher_failure(scripted_llm):
    with pytest.raises(AgentError):
        CompanyResearcherAgent(llm=scripted_llm([RuntimeError("down")])).run("Acme")


def test_critic_reads_json_followed_by_braced_chatter(scripted_llm):
    raw = '{"score": 9.2, "status": "ACCEPT", "harsh_feedback": []} (scores per {rubric})'
    critique = CriticAgent(llm=scripted_llm([raw])).run("Safe", "EPR", "text")
    assert critique.score == 9.2
    assert critique.status == CritiqueStatus.ACCEPT


def test_enum_values_survive_normalisation():
    for recommendation in Recommendation:
        assert QualificationResult(recommendation=recommendation).recommendation == recommendation
    for light in TrafficLight:
        assert QualificationResult(traffic_light=light).traffic_light == light
    for status in CritiqueStatus:
        assert CritiqueOutput(score=5, status=status).status == status
