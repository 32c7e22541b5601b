# server/core/moderation.py

import logging
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from core.config import Settings
from core.errors import ModerationUnavailableError


logger = logging.getLogger(__name__)


moderation_prompt = (
    "You are a content moderator for a public blog. Review the post below for profanity, "
    "swear words, hate speech, explicit material or otherwise offensive language.\n\n"
    "Title: {title}\n"
    "Content: {content}\n\n"
    "Reply with exactly one word: CLEAN if the post is acceptable, INAPPROPRIATE otherwise. "
    "Do not explain."
)


class ContentModerator:
    """
    Client for the chat-completions model used as content filter.

    One instance is built at startup and shared read-only by all requests.
    Each check is a single blocking call bounded by the configured timeout;
    failures are never retried.
    """

    def __init__(self, settings: Settings, llm=None):
        self.model = settings.moderation_model
        if llm is not None:
            self._llm = llm
        elif settings.deepseek_api_key:
            self._llm = ChatOpenAI(
                model=settings.moderation_model,
                api_key=settings.deepseek_api_key,
                base_url=settings.moderation_base_url,
                timeout=settings.moderation_timeout,
                max_retries=0,
                temperature=0,
            )
        else:
            self._llm = None

    @property
    def configured(self) -> bool:
        return self._llm is not None

    def is_clean(self, title: str, content: str) -> bool:
        if self._llm is None:
            logger.error("Moderation requested but DEEPSEEK_API_KEY is not set")
            raise ModerationUnavailableError("Content filtering service unavailable. Please try again later.")

        message = HumanMessage(content=moderation_prompt.format(title=title, content=content))
        try:
            response = self._llm.invoke([message])
        except Exception as exc:
            logger.exception("Moderation call to %s failed", self.model)
            raise ModerationUnavailableError("Content filtering service unavailable. Please try again later.") from exc

        verdict = str(response.content).strip().upper()
        if not verdict:
            raise ModerationUnavailableError("Content filtering service unavailable. Please try again later.")

        logger.info("Moderation verdict: %s", verdict)
        return verdict == "CLEAN"
