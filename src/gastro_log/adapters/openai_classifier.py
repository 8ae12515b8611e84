"""OpenAI Responses API client for ingredient classification."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from gastro_log.services.classification import (
    CLASSIFICATION_PROMPT,
    INGREDIENT_SCHEMA,
    IngredientClassifier,
    build_memo_text,
    parse_ingredients,
    to_data_url,
)


@dataclass
class OpenAIIngredientClassifier(IngredientClassifier):
    """Classifier backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAIIngredientClassifier":
        """Create an OpenAI classifier."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def classify(
        self, *, image: str | None, memo: str | None, model: str | None
    ) -> list[str]:
        """Call OpenAI with the meal photo and memo."""
        content: list[dict[str, object]] = [
            {"type": "input_text", "text": CLASSIFICATION_PROMPT}
        ]
        if image:
            content.append({"type": "input_image", "image_url": to_data_url(image)})
        if memo:
            content.append({"type": "input_text", "text": build_memo_text(memo)})

        request_payload: dict[str, object] = {
            "model": model or self.model,
            "input": [{"role": "user", "content": content}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "ingredient_extract",
                    "strict": True,
                    "schema": INGREDIENT_SCHEMA,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return parse_ingredients(output_text)
