"""Basic usage examples for the formmemory package."""

import asyncio
import logging

from formmemory import (
    EngineSettings,
    InteractionType,
    MemoryRetriever,
    MemoryStoreClient,
    StaticCredentialProvider,
)


async def context_example():
    """Enhance a form-generation prompt with memory insights."""
    async with MemoryRetriever(
        settings=EngineSettings(store_url="http://localhost:8000"),
        credentials=StaticCredentialProvider("your-api-key"),
    ) as retriever:
        prompt = "Create a customer feedback survey"

        context = await retriever.get_enhanced_context("user_123", prompt)
        if context:
            print(f"Enhanced prompt:\n{prompt}\n\n{context}")
        else:
            print("No memory context available")

        # Ranked records, best first
        result = await retriever.search_with_context("user_123", prompt, limit=5)
        if result is None:
            print("Memory store unavailable")
        else:
            print(f"\nFound {result.total_count} related memories:")
            for record in result.records:
                print(f"  - [{record.relevance_score:g}] {record.text}")


async def enhancement_example():
    """Gather everything the generation agent needs in one search."""
    async with MemoryRetriever(credentials=StaticCredentialProvider("your-api-key")) as retriever:
        enhancement = await retriever.build_enhancement("user_123", "Build a job application form")

        print(f"Has memory: {enhancement.has_memory}")
        print(f"Context: {enhancement.memory_context or '-'}")
        print(f"Examples: {enhancement.successful_examples or '-'}")
        print(f"\nFallback prompt:\n{enhancement.fallback_prompt}")


async def tracking_example():
    """Record interactions and preferences; failures only log a warning."""
    async with MemoryRetriever(credentials=StaticCredentialProvider("your-api-key")) as retriever:
        tracked = await retriever.track_form_interaction(
            user_id="user_123",
            form_id="form_42",
            form_title="Customer Feedback",
            interaction_type=InteractionType.CREATED,
            details={"field_count": 6},
        )
        print(f"Form interaction tracked: {tracked}")

        tracked = await retriever.track_user_preference(
            "user_123", "field_style", "compact", context="settings page"
        )
        print(f"Preference tracked: {tracked}")


async def client_example():
    """Use the store client directly; errors are raised, not swallowed."""
    async with MemoryStoreClient(
        base_url="http://localhost:8000",
        credentials=StaticCredentialProvider("your-api-key"),
    ) as client:
        history = await client.get_form_history("user_123")
        print(f"Form history entries: {history.total_count}")

        preferences = await client.get_user_preferences("user_123")
        for name, value in preferences.preferences.items():
            print(f"  - {name}: {value}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    print("=== Context Example ===")
    asyncio.run(context_example())

    print("\n=== Enhancement Example ===")
    asyncio.run(enhancement_example())

    print("\n=== Tracking Example ===")
    asyncio.run(tracking_example())

    print("\n=== Client Example ===")
    asyncio.run(client_example())
