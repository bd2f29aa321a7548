"""
Tests for the generate_image MCP tool registry and dispatch
"""
import asyncio
import base64
import io
import json
import os
import sys
import tempfile
import unittest
from unittest.mock import AsyncMock, Mock, patch

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx
import mcp.types as types
from mcp.shared.exceptions import McpError
from PIL import Image

from ai.clients.together_client import AsyncTogetherClient
from ai.exceptions.together_exceptions import APIError, MissingAPIKeyError
from ai.models.image_models import ImageGenerationResponse
from media.image_generator import ImageGenerator
from tools.image_tool_server import GENERATE_IMAGE_TOOL, ImageToolServer


def make_response(count, width=256, height=256):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), (10, 120, 60)).save(buffer, format="PNG")
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return ImageGenerationResponse.model_validate({
        "id": "gen-xyz",
        "data": [{"index": index, "b64_json": payload} for index in range(count)],
    })


class TestImageToolServer(unittest.TestCase):
    """Test cases for ImageToolServer"""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.client = Mock()
        self.client.create_images = AsyncMock(return_value=make_response(2))
        self.server = ImageToolServer(generator=ImageGenerator(self.client))

    def _call(self, name, arguments):
        return asyncio.run(self.server.call_tool(name, arguments))

    def test_lists_single_tool(self):
        tools = asyncio.run(self.server.list_tools())

        self.assertEqual(len(tools), 1)
        tool = tools[0]
        self.assertEqual(tool.name, "generate_image")
        self.assertEqual(tool.description, "Generate an image using Together AI")
        schema = tool.inputSchema
        self.assertEqual(schema["required"], ["prompt"])
        self.assertEqual(
            set(schema["properties"]),
            {"prompt", "model", "width", "height", "steps", "n", "outputDir", "format"},
        )
        self.assertEqual(schema["properties"]["format"]["enum"], ["png", "jpg", "svg"])
        self.assertEqual(schema["properties"]["outputDir"]["pattern"], "^/")
        self.assertEqual(schema["properties"]["width"]["default"], 1024)
        self.assertEqual(schema["properties"]["height"]["default"], 768)
        ui_schema = tool.model_dump()["uiSchema"]
        self.assertEqual(ui_schema["format"]["ui:widget"], "select")
        self.assertEqual(ui_schema["format"]["ui:options"]["label"], "Image Format")

    def test_list_tools_request_handler(self):
        handler = self.server.server.request_handlers[types.ListToolsRequest]
        result = asyncio.run(handler(types.ListToolsRequest(method="tools/list")))

        self.assertEqual([tool.name for tool in result.root.tools], [GENERATE_IMAGE_TOOL])

    def test_unknown_tool(self):
        with self.assertRaises(McpError) as ctx:
            self._call("generate_video", {"prompt": "x", "outputDir": self.tmpdir.name})

        self.assertEqual(ctx.exception.error.code, types.METHOD_NOT_FOUND)
        self.assertIn("Unknown tool: generate_video", ctx.exception.error.message)
        self.client.create_images.assert_not_called()
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_invalid_arguments_never_reach_api(self):
        for arguments in [None, {}, {"format": "png"}, {"prompt": "x", "format": "bmp"}]:
            with self.subTest(arguments=arguments):
                with self.assertRaises(McpError) as ctx:
                    self._call(GENERATE_IMAGE_TOOL, arguments)
                self.assertEqual(ctx.exception.error.code, types.INVALID_PARAMS)
                self.assertEqual(ctx.exception.error.message, "Invalid generate_image arguments")

        self.assertEqual(self.client.create_images.await_count, 0)

    def test_generation_failure_is_internal_error(self):
        self.client.create_images.side_effect = APIError("Together AI request failed with status 500: overloaded", 500)

        with self.assertRaises(McpError) as ctx:
            self._call(GENERATE_IMAGE_TOOL, {"prompt": "x", "outputDir": self.tmpdir.name})

        self.assertEqual(ctx.exception.error.code, types.INTERNAL_ERROR)
        self.assertEqual(
            ctx.exception.error.message,
            "Image generation failed: Together AI request failed with status 500: overloaded",
        )

    def test_response_without_data_is_internal_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"id": "x"}))
        server = ImageToolServer(generator=ImageGenerator(
            AsyncTogetherClient(api_key="test-key", transport=transport)
        ))
        target = os.path.join(self.tmpdir.name, "assets")

        with self.assertRaises(McpError) as ctx:
            asyncio.run(server.call_tool(GENERATE_IMAGE_TOOL, {"prompt": "p", "n": 2, "outputDir": target}))

        self.assertEqual(ctx.exception.error.code, types.INTERNAL_ERROR)
        self.assertTrue(ctx.exception.error.message.startswith("Image generation failed: Unexpected response from Together AI"))
        self.assertFalse(os.path.exists(target))

    def test_success_returns_json_text(self):
        content = self._call(GENERATE_IMAGE_TOOL, {
            "prompt": "a paper crane",
            "width": 256,
            "height": 256,
            "n": 2,
            "outputDir": self.tmpdir.name,
        })

        self.assertEqual(len(content), 1)
        self.assertEqual(content[0].type, "text")
        results = json.loads(content[0].text)
        self.assertEqual(len(results), 2)
        for index, result in enumerate(results):
            self.assertEqual(result["index"], index)
            self.assertNotIn("b64_json", result)
            self.assertTrue(os.path.isfile(result["filepath"]))
            self.assertEqual(result["filename"], os.path.basename(result["filepath"]))
            self.assertEqual(result["dimensions"]["final"], {"width": 256, "height": 256})

    def test_call_tool_request_handler(self):
        handler = self.server.server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name=GENERATE_IMAGE_TOOL,
                arguments={"prompt": "x", "width": 256, "height": 256, "outputDir": self.tmpdir.name},
            ),
        )

        result = asyncio.run(handler(request))

        self.assertFalse(result.root.isError)
        self.assertEqual(len(json.loads(result.root.content[0].text)), 2)

    def test_missing_api_key_prevents_startup(self):
        with patch("ai.clients.together_client.TOGETHER_API_KEY", None):
            with self.assertRaises(MissingAPIKeyError):
                ImageToolServer()


if __name__ == '__main__':
    unittest.main()
