import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

FALLBACK_REPLY = "I'm not sure how to answer that."

TUTOR_TEMPLATE = (
    "You are a tutor. Do NOT provide direct answers. Instead, review concepts "
    "and provide a similar solved example. Question: {question}"
)

_WHITESPACE = re.compile(r"\s+")


class ITutorClient:
    async def generate(self, prompt: str) -> str | None: ...


def strip_markup(text: str) -> str:
    """Plain text of ``text`` with every tag removed and whitespace collapsed."""
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(text, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return _WHITESPACE.sub(" ", soup.get_text(separator=" ")).strip()


def build_tutor_prompt(question: str) -> str:
    return TUTOR_TEMPLATE.format(question=question)


class AskTutor:
    def __init__(self, client: ITutorClient):
        self.client = client

    async def execute(self, raw_question: str) -> str:
        question = strip_markup(raw_question)
        if not question:
            raise ValueError("prompt is required")
        reply = await self.client.generate(build_tutor_prompt(question))
        return reply or FALLBACK_REPLY
