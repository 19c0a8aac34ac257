"""
Conversational Assistant Configuration Schema.

Connection parameters for the external text-generation collaborator. The API
key itself is never stored in the schema: only the name of the environment
variable that holds it.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .types import PositiveFloat


class AssistantConfig(BaseModel):
    """
    Endpoint, model and credentials lookup for the chat assistant.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    assistant_name: str = Field(default="Marcelo Claro", description="Persona name")
    model: str = Field(default="gemini-2.5-flash", description="Generation model id")
    endpoint: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="REST API base URL",
    )
    api_key_env: str = Field(
        default="GEMINI_API_KEY", description="Environment variable holding the API key"
    )
    timeout: PositiveFloat = Field(default=60.0, description="HTTP timeout (seconds)")

    def resolve_api_key(self) -> Optional[str]:
        """Read the API key from the environment; empty values count as missing."""
        value = os.getenv(self.api_key_env, "").strip()
        return value or None
