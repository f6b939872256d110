from typing import Awaitable, Callable, Protocol

GenerateText = Callable[[str], Awaitable[str]]


class TextGenerator(Protocol):
    model: str

    async def generate(self, prompt: str) -> str: ...
