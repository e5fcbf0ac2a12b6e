"""
Unit tests for the model output parser.
"""

from jarvis.agent.parser import last_value, parse

FEW_SHOT = """Question: What is capital of france?
Thought: This is about geography.
Action: lookup: capital of France.
Observation: Paris is the capital of France.
Answer: The capital of France is Paris.

"""


class TestParse:
    def test_all_fields(self) -> None:
        text = "Question: Q\nThought: T1\nAction: lookup: X\nObservation: O1\nAnswer: A1"
        assert parse(text) == {
            "thought": "T1",
            "action": "lookup: X",
            "observation": "O1",
            "answer": "A1",
        }

    def test_no_answer_label_yields_empty_mapping(self) -> None:
        assert parse("Thought: T1\nAction: lookup: X") == {}
        assert parse("") == {}

    def test_latest_instance_wins_over_examples(self) -> None:
        text = FEW_SHOT + "Question: Who wrote Hamlet?\nThought: Literature.\nAnswer: Shakespeare."
        assert parse(text)["answer"] == "Shakespeare."

    def test_window_shrinks_past_earlier_labels(self) -> None:
        # No live Observation or Action: their search moves the window into the examples.
        text = FEW_SHOT + "Question: Who wrote Hamlet?\nThought: Literature.\nAnswer: Shakespeare."
        parts = parse(text)
        assert parts["action"] == "lookup: capital of France."
        assert parts["observation"] == "Paris is the capital of France."
        assert parts["thought"] == "This is about geography."

    def test_missing_fields_are_omitted(self) -> None:
        assert parse("Answer: 42") == {"answer": "42"}

    def test_value_is_single_line(self) -> None:
        parts = parse("Thought: first line\nsecond line\nAnswer: yes\nmore text")
        assert parts == {"thought": "first line", "answer": "yes"}

    def test_labels_are_case_sensitive(self) -> None:
        assert parse("answer: lowercase") == {}

    def test_empty_answer_after_label(self) -> None:
        assert parse("Thought: T\nAnswer:") == {"thought": "T", "answer": ""}


class TestLastValue:
    def test_last_occurrence_without_answer(self) -> None:
        text = "Thought: T\nAction: lookup: old\nAction: lookup: warranty period"
        assert last_value(text, "Action") == "lookup: warranty period"

    def test_value_stops_at_newline(self) -> None:
        assert last_value("Action: exchange: USD EUR\nObservation: pending", "Action") == "exchange: USD EUR"

    def test_missing_label(self) -> None:
        assert last_value("Thought: nothing to do", "Action") is None
        assert last_value("", "Action") is None
