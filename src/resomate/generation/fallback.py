"""Deterministic, offline content generators.

These fill the requested structure from local string templates only, so they
cannot fail. They are the last tier of the generation cascade.
"""

from resomate.generation.models import (
    GenerationRequest,
    OperativeClause,
    PreambleClause,
    ResolutionContent,
    RhetoricContent,
    RhetoricDevice,
    SpeechContent,
)

_FOCUS_PHRASES = {
    "general": "sustainable and inclusive solutions",
    "economic": "economic resilience and equitable growth",
    "security": "peace, stability and collective security",
    "humanitarian": "the protection of human dignity and access to humanitarian aid",
    "environmental": "environmental protection and climate resilience",
}


def _or(value: str, default: str) -> str:
    return value.strip() or default


def fallback_resolution(request: GenerationRequest) -> ResolutionContent:
    topic = _or(request.topic, "the matter under discussion")
    country = _or(request.country, "the sponsoring delegation")
    committee = _or(request.committee, "this committee")
    focus = _FOCUS_PHRASES.get(request.focus, _FOCUS_PHRASES["general"])

    preamble = [
        f"Recognizing the urgent need to address {topic} in the context of international cooperation",
        f"Noting with concern the current challenges facing the global community regarding {topic}",
        f"Acknowledging the vital role of {country} in promoting {focus}",
        f"Emphasizing the importance of multilateral dialogue within the {committee}",
        "Reaffirming the principles of the Charter of the United Nations",
    ]
    operative = [
        f"Calls upon all Member States to strengthen their commitment to addressing {topic}",
        "Requests the Secretary-General to establish a comprehensive framework for action",
        "Encourages international cooperation and knowledge sharing among nations",
        "Decides to allocate the necessary resources for the implementation of this resolution",
        "Invites all stakeholders to participate actively in the proposed initiatives",
    ]
    return ResolutionContent(
        preamble=[PreambleClause(type="clause", text=text) for text in preamble],
        operative=[OperativeClause(number=index, text=text) for index, text in enumerate(operative, start=1)],
    )


def fallback_rhetoric(request: GenerationRequest) -> RhetoricContent:
    topic = _or(request.topic, "this issue")
    devices = [
        RhetoricDevice(
            category="question",
            headline="Thought-provoking questions that challenge the status quo",
            examples=[
                f"How can we justify inaction on {topic} when the stakes are so high?",
                f"What will future generations say if we fail to address {topic} today?",
                "Can we truly call ourselves leaders if we ignore this critical issue?",
            ],
        ),
        RhetoricDevice(
            category="repetition",
            headline="Repetition that reinforces our commitment",
            examples=[
                "We must act with courage, with unity, with urgency.",
                "This is our moment, our responsibility, our opportunity to lead.",
            ],
        ),
        RhetoricDevice(
            category="emotive",
            headline="Appeals to human dignity and shared values",
            examples=[
                f"Behind every statistic about {topic} is a human life and a future at stake.",
                "We speak not just as diplomats, but as guardians of human dignity.",
            ],
        ),
        RhetoricDevice(
            category="contrast",
            headline="Sharp distinctions that clarify the choice before us",
            examples=[
                "We can choose progress over stagnation, hope over despair.",
                f"The question is not whether we can afford to act on {topic}, but whether we can afford not to.",
            ],
        ),
    ]
    return RhetoricContent(devices=devices)


def fallback_speech(request: GenerationRequest) -> SpeechContent:
    topic = _or(request.topic, "the matter before us")
    country = _or(request.country, "Our delegation")
    committee = _or(request.committee, "committee")
    body = "\n\n".join(
        [
            "Honorable Chair, distinguished delegates,",
            f"{country} stands before this esteemed {committee} today to address the critical issue of {topic}. "
            "This matter requires our immediate attention and collective action.",
            f"We recognize that {topic} presents both challenges and opportunities for the international "
            "community, and that sustainable solutions must benefit all Member States.",
            f"{country} proposes a comprehensive approach. First, strengthening international cooperation "
            "through dialogue and partnership. Second, implementing evidence-based policies that address root "
            "causes. Third, ensuring resources and technical assistance reach developing countries. Fourth, "
            "establishing clear monitoring and evaluation frameworks.",
            f"Through unity and shared responsibility we can overcome the challenges posed by {topic}. "
            f"{country} stands ready to work with all delegations to achieve meaningful results.",
            "Thank you, Chair.",
        ]
    )
    return SpeechContent(
        title=f"{country}'s Position on {topic}",
        body=body,
        rhetoric_inserts=fallback_rhetoric(request).devices,
    )
