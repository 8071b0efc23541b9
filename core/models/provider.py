from enum import Enum


class ProviderName(str, Enum):
    """Which LLM backend services a request; the value is the wire name."""

    gemini = "gemini"      # primary
    openai = "openai"      # secondary
    deepseek = "deepseek"  # tertiary
