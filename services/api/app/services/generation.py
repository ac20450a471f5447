from __future__ import annotations

import logging
from typing import Dict, Tuple

from langchain_core.prompts import PromptTemplate

from studymate_shared import AnswerMode
from studymate_shared.errors import GenerationError, ProviderError, ProviderTimeout
from studymate_shared.providers import GenerationProvider

logger = logging.getLogger(__name__)

CONTEXT_QUESTION_TEMPLATE = """Answer the question based on the following context:

{context}

Question: {question}"""

PAST_PAPER_TEMPLATE = """Context: {context}
Question: {question}"""

SYSTEM_PROMPTS: Dict[AnswerMode, str] = {
    AnswerMode.DOCUMENT: "You are a helpful assistant.",
    AnswerMode.PAST_PAPER: "Generate a response based on the provided context:",
    AnswerMode.AGGREGATE: "Give a short response in 2-4 lines.",
}

USER_TEMPLATES: Dict[AnswerMode, PromptTemplate] = {
    AnswerMode.DOCUMENT: PromptTemplate.from_template(CONTEXT_QUESTION_TEMPLATE),
    AnswerMode.PAST_PAPER: PromptTemplate.from_template(PAST_PAPER_TEMPLATE),
    AnswerMode.AGGREGATE: PromptTemplate.from_template(CONTEXT_QUESTION_TEMPLATE),
}

TITLE_SYSTEM_PROMPT = "Generate a concise and informative title for the following text:"
TITLE_MAX_TOKENS = 60


class AnswerSynthesizer:
    """Builds prompts and turns provider completions into answers.

    Provider failures and empty completions become :class:`GenerationError`;
    nothing is retried and no fallback text is produced.
    """

    def __init__(self, generator: GenerationProvider, *, max_tokens: int = 200) -> None:
        self._generator = generator
        self._max_tokens = max_tokens

    def build_prompt(self, context: str, question: str, mode: AnswerMode) -> Tuple[str, str]:
        user_prompt = USER_TEMPLATES[mode].format(context=context, question=question)
        return SYSTEM_PROMPTS[mode], user_prompt

    async def synthesize(self, context: str, question: str, mode: AnswerMode) -> str:
        system_prompt, user_prompt = self.build_prompt(context, question, mode)
        logger.debug("prompt built", extra={"mode": mode.value, "prompt_chars": len(user_prompt)})
        return await self._complete(system_prompt, user_prompt, self._max_tokens)

    async def generate_title(self, text: str) -> str:
        title = await self._complete(TITLE_SYSTEM_PROMPT, text, TITLE_MAX_TOKENS)
        return title.strip().strip('"').strip("'")

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        try:
            completion = await self._generator.complete(system_prompt, user_prompt, max_tokens)
        except ProviderTimeout:
            raise
        except ProviderError as exc:
            raise GenerationError("Error generating response") from exc

        answer = (completion or "").strip()
        if not answer:
            raise GenerationError("Empty response from the generation provider")
        return answer
