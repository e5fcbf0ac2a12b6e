"""
LangGraph agent: reason → (answer directly | act → conclude).

The model is prompted with few-shot Question/Thought/Action/Observation/Answer
sessions. If its reply names an action, the action runs and a second
completion turns the observation into the final answer; otherwise the reply's
own Answer is final. At most two completions per question.
"""

import logging
from dataclasses import dataclass
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph

from jarvis.agent.llm import complete
from jarvis.agent.parser import last_value, parse
from jarvis.agent.tools import Action, ActionKind, execute_action, parse_action
from jarvis.core.config import MAX_ACTION_RETRIES
from jarvis.core.session_store import ConversationTurn
from jarvis.services.ingestion_service import get_index
from jarvis.services.retrieval_service import FROM_MEMORY, RetrievalResult
from jarvis.services.vector_store import DocumentIndex

logger = logging.getLogger(__name__)

NO_ANSWER = "?"

HISTORY_MESSAGE = "Before formulating a thought, consider the following conversation history."

SYSTEM_MESSAGE = """You run in a process of Question, Thought, Action, Observation.

Use Thought to describe your thoughts about the question you have been asked.
Observation will be the result of running those actions.

If you can not answer the question from your memory, use Action to run one of these actions available to you:
- lookup: terms
- exchange: from to

Here are some sample sessions.

Question: What is capital of france?
Thought: This is about geography, I can recall the answer from my memory.
Action: lookup: capital of France.
Observation: Paris is the capital of France.
Answer: The capital of France is Paris.

Question: Who painted Mona Lisa?
Thought: This is about general knowledge, I can recall the answer from my memory.
Action: lookup: painter of Mona Lisa.
Observation: Mona Lisa was painted by Leonardo da Vinci .
Answer: Leonardo da Vinci painted Mona Lisa.

Question: What is the exchange rate from USD to EUR?
Thought: This is about currency exchange, I need to look up the current rate.
Action: exchange: USD EUR
Observation: As per Mon, 01 Jan 2024 00:00:01 +0000, 1 USD is equal to 1 EUR.
Answer: One US dollar is worth about one euro.
"""


class AgentState(TypedDict):
    question: str
    history: list               # ConversationTurn, oldest first
    index: DocumentIndex
    inquiry: str                # "Question: ..." line closing the prompt
    parsed: dict                # fields parsed from the first completion
    action: Action | None
    retries: int
    observation: RetrievalResult | None
    answer: str


@dataclass(frozen=True)
class AgentResult:
    answer: str
    turn: ConversationTurn
    source: str
    reference: str


def build_context(history: list[ConversationTurn]) -> str:
    """Flatten earlier turns into "Field: value" lines, skipping empty fields."""
    if not history:
        return ""
    blocks = []
    for turn in history:
        lines = [
            f"{name.capitalize()}: {value}"
            for name, value in (
                ("question", turn.question),
                ("thought", turn.thought),
                ("action", turn.action),
                ("observation", turn.observation),
                ("answer", turn.answer),
            )
            if value
        ]
        blocks.append("\n".join(lines))
    return f"{HISTORY_MESSAGE}\n\n" + "\n".join(blocks)


def build_prompt(inquiry: str, history: list[ConversationTurn]) -> str:
    return f"{SYSTEM_MESSAGE}\n\n{build_context(history)}\n\nNow let's answer some question!\n\n{inquiry}"


def final_prompt(inquiry: str, observation: str) -> str:
    """Prompt for the second completion: the inquiry plus the action's observation."""
    return f"{inquiry}\nObservation: {observation}\nThought: Now I have the answer.\nAnswer:"


async def _reason(state: AgentState) -> dict:
    """Node 1: first completion; parse the model's own reply."""
    inquiry = state["inquiry"]
    prompt = build_prompt(inquiry, state.get("history") or [])
    logger.info("[graph:reason] IN  inquiry=%r history_len=%d prompt_len=%d", inquiry, len(state.get("history") or []), len(prompt))
    response = await complete(prompt)
    # Few-shot and history sections reuse the labels; only the live exchange is parsed.
    parsed = parse(f"{inquiry}\n{response}")
    if not parsed.get("action"):
        # A reply may stop right after its Action line, before any Answer.
        raw_action = last_value(response, "Action")
        if raw_action:
            thought = parsed.get("thought") or last_value(response, "Thought") or ""
            parsed = {**parsed, "action": raw_action, "thought": thought}
    action = parse_action(parsed["action"]) if parsed.get("action") else None
    logger.info("[graph:reason] OUT parsed=%r action=%r", parsed, action)
    return {"parsed": parsed, "action": action}


def _route_after_reason(state: AgentState) -> Literal["act", "answer_directly"]:
    next_node = "act" if state.get("action") is not None else "answer_directly"
    logger.info("[graph:route_after_reason] -> %s", next_node)
    return next_node


async def _answer_directly(state: AgentState) -> dict:
    """Node 2a: no action; the reply's Answer is final."""
    answer = (state.get("parsed") or {}).get("answer") or ""
    if not answer:
        logger.warning("[graph:answer_directly] no answer extractable; returning placeholder")
        answer = NO_ANSWER
    logger.info("[graph:answer_directly] OUT answer=%r", answer)
    return {"answer": answer}


async def _act(state: AgentState) -> dict:
    """Node 2b: dispatch the action. An unknown verb is retried once as a lookup of the question."""
    action = state["action"]
    retries = state.get("retries") or 0
    if action.kind is ActionKind.UNKNOWN and retries < MAX_ACTION_RETRIES:
        logger.warning(
            "[graph:act] unrecognized action %r; falling back to lookup (retry %d/%d)",
            action.name, retries + 1, MAX_ACTION_RETRIES,
        )
        return {"action": Action.lookup(state["question"]), "retries": retries + 1}

    parsed = state.get("parsed") or {}
    hint = parsed.get("observation") or parsed.get("answer") or ""
    logger.info("[graph:act] IN  kind=%s argument=%r hint=%r", action.kind.value, action.argument, hint)
    observation = await execute_action(action, state["question"], hint, state["index"])
    logger.info("[graph:act] OUT observation=%r source=%r", observation.result, observation.source)
    return {"observation": observation}


def _route_after_act(state: AgentState) -> Literal["act", "conclude"]:
    return "conclude" if state.get("observation") is not None else "act"


async def _conclude(state: AgentState) -> dict:
    """Node 3: second completion over the observation."""
    observation = state["observation"]
    prompt = final_prompt(state["inquiry"], observation.result)
    logger.info("[graph:conclude] IN  prompt_len=%d", len(prompt))
    answer = (await complete(prompt)).strip()
    if not answer:
        logger.warning("[graph:conclude] empty completion; returning placeholder")
        answer = NO_ANSWER
    logger.info("[graph:conclude] OUT answer=%r", answer)
    return {"answer": answer}


def build_graph():
    """
    Build and compile the agent graph.
    reason → answer_directly → END, or reason → act (→ act once more on fallback) → conclude → END.
    """
    graph = StateGraph(AgentState)

    graph.add_node("reason", _reason)
    graph.add_node("answer_directly", _answer_directly)
    graph.add_node("act", _act)
    graph.add_node("conclude", _conclude)

    graph.set_entry_point("reason")
    graph.add_conditional_edges("reason", _route_after_reason)
    graph.add_conditional_edges("act", _route_after_act)
    graph.add_edge("answer_directly", END)
    graph.add_edge("conclude", END)

    return graph.compile()


async def run_agent(
    question: str,
    history: list[ConversationTurn] | None = None,
    index: DocumentIndex | None = None,
) -> AgentResult:
    """
    Answer one question. history is context only; the caller appends the returned turn.
    index defaults to the process-wide document index.
    """
    if not question or not str(question).strip():
        raise ValueError("question is required")
    q = str(question).strip()
    hist = list(history) if history is not None else []
    idx = index if index is not None else get_index()
    logger.info("[run_agent] START question=%r history_len=%d windows=%d", q, len(hist), len(idx))
    initial: AgentState = {
        "question": q,
        "history": hist,
        "index": idx,
        "inquiry": f"Question: {q}",
        "parsed": {},
        "action": None,
        "retries": 0,
        "observation": None,
        "answer": "",
    }
    final = await build_graph().ainvoke(initial)

    parsed = final.get("parsed") or {}
    action: Action | None = final.get("action")
    observation: RetrievalResult | None = final.get("observation")
    answer = final.get("answer") or NO_ANSWER
    if observation is None:
        source, reference = FROM_MEMORY, FROM_MEMORY
        observed = parsed.get("observation", "")
    else:
        source, reference = observation.source, observation.reference
        observed = observation.result
    turn = ConversationTurn(
        question=q,
        thought=parsed.get("thought", ""),
        action=f"{action.name}: {action.argument}" if action is not None else "",
        observation=observed,
        answer=answer,
    )
    logger.info("[run_agent] END answer=%r source=%r", answer, source)
    return AgentResult(answer=answer, turn=turn, source=source, reference=reference)
