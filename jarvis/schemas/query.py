"""Schemas for the query endpoint."""

from pydantic import BaseModel, Field

from jarvis.core.config import DEFAULT_SESSION_ID


class QueryRequest(BaseModel):
    """Request body for POST /query. History is stored server-side by session_id."""

    question: str = Field(..., min_length=1, description="User question for the agent.")
    session_id: str = Field(DEFAULT_SESSION_ID, min_length=1, description="Session ID; chat history is stored on the server for this session.")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    answer: str = Field(..., description="Final answer from the agent.")
    thought: str = Field("", description="The model's Thought for this question.")
    action: str = Field("", description="Action the agent ran (e.g. 'lookup: terms'); empty when answered directly.")
    observation: str = Field("", description="Result of the action.")
    source: str = Field("", description="Provenance: page and relevance, or 'From memory'.")
    reference: str = Field("", description="Passage text the answer was drawn from, or 'From memory'.")
