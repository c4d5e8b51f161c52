"""LLM server client."""
from typing import List, Dict, Optional
import httpx

SYSTEM_PROMPT_WITH_CONTEXT = (
    "You are a helpful assistant for this website. Answer the user's question "
    "using the retrieved website content below. Keep the wording of the content "
    "where possible and answer in plain text."
)

SYSTEM_PROMPT_WITHOUT_CONTEXT = (
    "You are a helpful assistant for this website. No website content was found "
    "for this question; answer briefly and say so honestly if you do not know."
)


class LLMClient:
    """Client for an OpenAI-compatible chat completions server."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8080",
        model: str = "qwen2.5-coder-7b",
        max_tokens: int = 1024,
        temperature: float = 0.3,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: Base URL of LLM server
            model: Model name
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            api_key: Bearer token, if the server needs one
            client: Preconfigured HTTP client
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        headers = {}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = client or httpx.AsyncClient(timeout=120.0, headers=headers)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Send chat completion request.

        Args:
            messages: List of messages [{"role": "user", "content": "..."}]
            max_tokens: Override max_tokens
            temperature: Override temperature

        Returns:
            Generated text response
        """
        # Handle both base URL and full endpoint URL
        if "/v1/chat/completions" in self.base_url:
            url = self.base_url
        else:
            url = f"{self.base_url}/v1/chat/completions"

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": temperature if temperature is not None else self.temperature,
            "stream": False,
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()

            data = response.json()

            # Format: {"choices": [{"message": {"content": "..."}}]}
            if data.get("choices"):
                return data["choices"][0]["message"]["content"]

            return ""

        except httpx.HTTPError as e:
            raise RuntimeError(f"LLM server error: {e}") from e

    async def generate_with_context(
        self,
        messages: List[Dict[str, str]],
        context: str,
    ) -> str:
        """
        Answer a conversation grounded on retrieved site content.

        Args:
            messages: Conversation so far, last entry being the user's question
            context: Retrieved passages ("" when nothing was found)

        Returns:
            Generated answer
        """
        if context:
            system_prompt = f"{SYSTEM_PROMPT_WITH_CONTEXT}\n\nRetrieved content:\n{context}"
        else:
            system_prompt = SYSTEM_PROMPT_WITHOUT_CONTEXT

        return await self.chat([{"role": "system", "content": system_prompt}, *messages])

    async def health_check(self) -> bool:
        """Check if LLM server is healthy."""
        try:
            health_url = self.base_url.replace("/v1/chat/completions", "")
            response = await self.client.get(f"{health_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
