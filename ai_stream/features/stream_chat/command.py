from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any

ASSISTANT_ROLE = "assistant"


class ChatMessage(BaseModel):
    role: str
    content: str

    @property
    def block_type(self) -> str:
        """Assistant turns are model output, everything else is input."""
        return "output_text" if self.role == ASSISTANT_ROLE else "input_text"


class StreamChatRequest(BaseModel):
    messages: List[ChatMessage] = []
    system: Optional[str] = None

    @field_validator("messages", mode="before")
    @classmethod
    def _null_messages(cls, value):
        return [] if value is None else value

    def to_upstream_input(self) -> List[Dict[str, Any]]:
        """
        Builds the Responses API `input` list, keeping message order and
        putting the system prompt, when given, first.
        """
        upstream_input: List[Dict[str, Any]] = []
        if self.system:
            upstream_input.append(
                {"role": "system", "content": [{"type": "input_text", "text": self.system}]}
            )
        for message in self.messages:
            upstream_input.append(
                {"role": message.role, "content": [{"type": message.block_type, "text": message.content}]}
            )
        return upstream_input
