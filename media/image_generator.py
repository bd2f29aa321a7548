import asyncio
import os
import time
from typing import List, Optional

from ai.clients.together_client import AsyncTogetherClient
from ai.models.image_models import (
    GeneratedImage,
    ImageDimensions,
    ImageGenerationRequest,
    ProcessedImageResult,
)
from config import DEFAULT_OUTPUT_DIRNAME, MIN_API_DIMENSION
from media.image_processor import (
    compute_target_size,
    decode_image,
    read_dimensions,
    resize_contain,
    save_image,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)


class ImageGenerator:
    def __init__(self, client: AsyncTogetherClient):
        self.client = client

    async def generate(self, request: ImageGenerationRequest) -> List[ProcessedImageResult]:
        """
        Generate images for a validated request and write them to disk.

        The API never sees a side below MIN_API_DIMENSION; smaller requests
        are scaled down locally after generation. Any failure aborts the whole
        call, and files already written by other images are left in place.
        """
        requested_width = request.requested_width
        requested_height = request.requested_height
        api_width = max(MIN_API_DIMENSION, requested_width)
        api_height = max(MIN_API_DIMENSION, requested_height)
        image_format = request.requested_format

        logger.info(
            f"🎨 Generating {request.requested_count} image(s) with {request.requested_model} "
            f"at {api_width}x{api_height} (requested {requested_width}x{requested_height})"
        )
        response = await self.client.create_images(
            model=request.requested_model,
            prompt=request.prompt,
            width=api_width,
            height=api_height,
            steps=request.requested_steps,
            n=request.requested_count,
        )

        output_dir = self.resolve_output_dir(request.output_dir)
        os.makedirs(output_dir, exist_ok=True)

        original = ImageDimensions(width=api_width, height=api_height)

        # One task per returned image. Each task owns its decoded buffer and
        # writes its own file, so completion order does not matter and gather
        # keeps results in API order.
        tasks = [
            asyncio.to_thread(
                self._process_image,
                image,
                index,
                requested_width,
                requested_height,
                image_format,
                output_dir,
                original,
            )
            for index, image in enumerate(response.data)
        ]
        results = await asyncio.gather(*tasks)

        logger.info(f"✅ Saved {len(results)} image(s) to {output_dir}")
        return list(results)

    @staticmethod
    def resolve_output_dir(output_dir: Optional[str]) -> str:
        if output_dir:
            return os.path.abspath(output_dir)
        return os.path.join(os.getcwd(), DEFAULT_OUTPUT_DIRNAME)

    def _process_image(
        self,
        image: GeneratedImage,
        index: int,
        requested_width: int,
        requested_height: int,
        image_format: str,
        output_dir: str,
        original: ImageDimensions,
    ) -> ProcessedImageResult:
        decoded = decode_image(image.b64_json)

        target_size = compute_target_size(
            requested_width, requested_height, decoded.width, decoded.height
        )
        if target_size is not None:
            logger.debug(f"Resizing image {index} from {decoded.width}x{decoded.height} to {target_size[0]}x{target_size[1]}")
            decoded = resize_contain(decoded, target_size)

        timestamp = int(time.time() * 1000)
        filename = f"image_{timestamp}_{index}.{image_format}"
        written_path = save_image(decoded, os.path.join(output_dir, filename), image_format)

        final = read_dimensions(written_path)
        logger.debug(f"💾 Wrote {written_path} ({final.width}x{final.height})")

        return ProcessedImageResult.from_generated(
            image,
            filepath=written_path,
            filename=os.path.basename(written_path),
            original=original,
            final=final,
        )
