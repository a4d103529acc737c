"""
生成流程AI服务单元测试
Provider与OpenAI客户端均以mock替代
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from draw2real.core.ai.config import ModelConfig, image_model_config, vision_model_config
from draw2real.core.ai.exceptions import AIProviderError
from draw2real.core.ai.factory import AIProviderFactory
from draw2real.core.ai.models import ImageGenerationResult, ModelCapability
from draw2real.core.ai.providers.base import BaseImageGenProvider, BaseVisionProvider
from draw2real.core.ai.providers.openai.dalle import DALLEProvider
from draw2real.core.ai.providers.openai.vision import OpenAIVisionProvider
from draw2real.core.ai.registry import register_all_providers
from draw2real.services.generation.ai_service import GenerationAIService
from tests.utils.factories import make_payload


def _model_config(name: str, parameters=None, max_tokens=None) -> ModelConfig:
    return ModelConfig(
        model_id=name,
        model_name=name,
        api_key="sk-test",
        parameters=parameters or {},
        max_tokens=max_tokens
    )


class FakeVisionProvider(BaseVisionProvider):
    def __init__(self, model_config):
        super().__init__(model_config)
        self.describe_image = AsyncMock(return_value="  A purple octopus juggling apples.  ")
        self.close = AsyncMock()

    def get_provider_name(self) -> str:
        return "fake_vision"

    async def describe_image(self, image, instruction, temperature=0.7, max_tokens=500):
        raise NotImplementedError


class FakeImageProvider(BaseImageGenProvider):
    def __init__(self, model_config):
        super().__init__(model_config)
        self.generate_image = AsyncMock(
            return_value=ImageGenerationResult(success=True, image_url="https://images.example.com/1.png")
        )
        self.close = AsyncMock()

    def get_provider_name(self) -> str:
        return "fake_image"

    async def generate_image(self, prompt, size="1024x1024", quality="standard"):
        raise NotImplementedError


@pytest.fixture
def vision_provider():
    return FakeVisionProvider(_model_config("vision", parameters={"temperature": 0.2}, max_tokens=120))


@pytest.fixture
def image_provider():
    return FakeImageProvider(_model_config("image", parameters={"size": "1024x1024", "quality": "hd"}))


@pytest.fixture
def ai_service(vision_provider, image_provider):
    return GenerationAIService(
        vision_provider,
        image_provider,
        describe_instruction="Describe this drawing.",
        prompt_template="Realistic: {description}"
    )


@pytest.mark.unit
@pytest.mark.generation
class TestGenerationAIService:
    """描述与合成测试"""

    @pytest.mark.asyncio
    async def test_describe_uses_instruction_and_model_parameters(self, ai_service, vision_provider):
        drawing = make_payload("PNG")

        description = await ai_service.describe(drawing)

        assert description == "A purple octopus juggling apples."
        vision_provider.describe_image.assert_awaited_once_with(
            drawing,
            "Describe this drawing.",
            temperature=0.2,
            max_tokens=120
        )

    @pytest.mark.asyncio
    async def test_blank_description_is_an_error(self, ai_service, vision_provider):
        vision_provider.describe_image.return_value = "   "

        with pytest.raises(AIProviderError) as exc_info:
            await ai_service.describe(make_payload("PNG"))

        assert exc_info.value.provider == "fake_vision"

    @pytest.mark.asyncio
    async def test_synthesize_uses_prompt_template(self, ai_service, image_provider):
        url = await ai_service.synthesize("A purple octopus")

        assert url == "https://images.example.com/1.png"
        image_provider.generate_image.assert_awaited_once_with(
            prompt="Realistic: A purple octopus",
            size="1024x1024",
            quality="hd"
        )

    @pytest.mark.asyncio
    async def test_synthesize_without_url_is_an_error(self, ai_service, image_provider):
        image_provider.generate_image.return_value = ImageGenerationResult(
            success=False,
            error_message="content policy"
        )

        with pytest.raises(AIProviderError) as exc_info:
            await ai_service.synthesize("A purple octopus")

        assert exc_info.value.message == "content policy"
        assert exc_info.value.provider == "fake_image"

    @pytest.mark.asyncio
    async def test_close_closes_both_providers(self, ai_service, vision_provider, image_provider):
        await ai_service.close()

        vision_provider.close.assert_awaited_once()
        image_provider.close.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.generation
class TestOpenAIProviders:
    """OpenAI Provider测试"""

    def test_factory_creates_registered_providers(self):
        register_all_providers()

        vision = AIProviderFactory.create(vision_model_config(), ModelCapability.VISION)
        image = AIProviderFactory.create(image_model_config(), ModelCapability.IMAGE_GEN)

        assert isinstance(vision, OpenAIVisionProvider)
        assert isinstance(image, DALLEProvider)

    def test_factory_rejects_unmapped_capability(self):
        with pytest.raises(ValueError):
            AIProviderFactory.create(vision_model_config(), ModelCapability.IMAGE_GEN)

    @pytest.mark.asyncio
    async def test_vision_sends_drawing_as_data_url(self):
        provider = OpenAIVisionProvider(vision_model_config())
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="A red kite"))])
        provider.client = MagicMock()
        provider.client.chat.completions.create = AsyncMock(return_value=response)

        text = await provider.describe_image(make_payload("PNG"), "Describe this drawing.")

        assert text == "A red kite"
        content = provider.client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Describe this drawing."}
        assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")

    @pytest.mark.asyncio
    async def test_sdk_errors_become_provider_errors(self):
        provider = DALLEProvider(image_model_config())
        provider.client = MagicMock()
        provider.client.images.generate = AsyncMock(
            side_effect=openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/images"))
        )

        with pytest.raises(AIProviderError) as exc_info:
            await provider.generate_image("a kite")

        assert exc_info.value.provider == "openai_dalle"
        assert exc_info.value.message == "Could not reach the image service"

    @pytest.mark.asyncio
    async def test_dalle_returns_single_url(self):
        provider = DALLEProvider(image_model_config())
        image = SimpleNamespace(url="https://images.example.com/k.png", revised_prompt="a red kite")
        provider.client = MagicMock()
        provider.client.images.generate = AsyncMock(return_value=SimpleNamespace(data=[image]))

        result = await provider.generate_image("a kite", size="1024x1024")

        assert result.success is True
        assert result.image_url == "https://images.example.com/k.png"
        assert result.revised_prompt == "a red kite"
        kwargs = provider.client.images.generate.call_args.kwargs
        assert kwargs["n"] == 1
        assert kwargs["response_format"] == "url"
