"""
Token estimates for prompt templates, shown to admins so they can keep the
main generation prompt (template plus training data) inside a model's context.
"""

import math
import logging
from typing import Dict, Optional

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


class TokenCalculator:
    """
    Token counter with cached tiktoken encoders.

    Models are given as OpenRouter ids ("openai/gpt-4"); the provider prefix is
    dropped before the tiktoken lookup and unknown models use cl100k_base.
    """

    def __init__(self):
        self._encoders = {}

    def _get_encoding_for_model(self, model: str) -> str:
        model_name = model.split("/", 1)[-1] if model else ""
        try:
            return tiktoken.encoding_name_for_model(model_name)
        except KeyError:
            return DEFAULT_ENCODING

    def count_tokens(self, text: Optional[str], model: str = "openai/gpt-3.5-turbo") -> int:
        """
        Count tokens in text using the model's tokenizer.

        Falls back to ceil(len(text) / 4) when the tokenizer cannot be loaded
        (tiktoken fetches encodings on first use).
        """
        if not text:
            return 0

        encoding_name = self._get_encoding_for_model(model)
        try:
            if encoding_name not in self._encoders:
                self._encoders[encoding_name] = tiktoken.get_encoding(encoding_name)
                logger.debug(f"Created tokenizer for encoding: {encoding_name}")
            return len(self._encoders[encoding_name].encode(text))
        except Exception as e:
            fallback_count = math.ceil(len(text) / 4)
            logger.warning(f"Tokenizer unavailable for {model} ({e}); using estimate {fallback_count}")
            return fallback_count

    def estimate_generation_tokens(
        self,
        template: Optional[str],
        training_data: Optional[str],
        model: str = "openai/gpt-3.5-turbo",
    ) -> Dict[str, int]:
        template_tokens = self.count_tokens(template, model)
        training_tokens = self.count_tokens(training_data, model)
        return {
            "template_tokens": template_tokens,
            "training_data_tokens": training_tokens,
            "total_tokens": template_tokens + training_tokens,
        }


token_calculator = TokenCalculator()


def count_tokens(text: Optional[str], model: str = "openai/gpt-3.5-turbo") -> int:
    return token_calculator.count_tokens(text, model)
