import asyncio
import logging

from grounded_gemini.client import GroundedClient
from grounded_gemini.credentials import EnvCredentialResolver
from grounded_gemini.tools import ToolContext, WebSearchParams, web_search
from grounded_gemini.types import ModelDescriptor, StreamUpdate


def show(update: StreamUpdate) -> None:
    print(f"\r{len(update.text)} chars", end="", flush=True)


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    client = GroundedClient(credentials=EnvCredentialResolver())
    model = ModelDescriptor(
        id="gemini-2.5-flash",
        provider="google",
        api="google-generative-ai",
        base_url="https://generativelanguage.googleapis.com/v1beta",
    )

    try:
        result = await web_search(
            ToolContext(client=client, models=[model]),
            WebSearchParams(query="What is the latest stable Python release?"),
            on_update=show,
        )
    finally:
        await client.aclose()

    print()
    print(result.text)


if __name__ == "__main__":
    asyncio.run(main())
