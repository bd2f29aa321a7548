"""
Together AI Image MCP Server
Exposes a single generate_image tool over the MCP stdio transport
"""
import json
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from ai.clients.together_client import AsyncTogetherClient
from ai.exceptions.together_exceptions import InvalidArgumentsError
from ai.models.image_models import ImageGenerationRequest
from config import (
    DEFAULT_FORMAT,
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_COUNT,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_STEPS,
    DEFAULT_WIDTH,
    SERVER_NAME,
    SERVER_VERSION,
    SUPPORTED_FORMATS,
)
from media.image_generator import ImageGenerator
from utils.logging_config import get_logger

logger = get_logger(__name__)

GENERATE_IMAGE_TOOL = "generate_image"

GENERATE_IMAGE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "prompt": {
            "type": "string",
            "description": "Text description of the image to generate",
        },
        "model": {
            "type": "string",
            "description": "Model to use for generation",
            "default": DEFAULT_IMAGE_MODEL,
        },
        "width": {
            "type": "number",
            "description": "Image width in pixels",
            "default": DEFAULT_WIDTH,
        },
        "height": {
            "type": "number",
            "description": "Image height in pixels",
            "default": DEFAULT_HEIGHT,
        },
        "steps": {
            "type": "number",
            "description": "Number of inference steps",
            "default": DEFAULT_STEPS,
        },
        "n": {
            "type": "number",
            "description": "Number of images to generate",
            "default": DEFAULT_IMAGE_COUNT,
        },
        "outputDir": {
            "type": "string",
            "description": "Full absolute path where images will be saved (e.g., /Users/username/Projects/myapp/src/assets)",
            "pattern": "^/",
            "examples": ["/Users/username/Projects/myapp/src/assets"],
        },
        "format": {
            "type": "string",
            "enum": list(SUPPORTED_FORMATS),
            "description": "Output format for the generated images",
            "default": DEFAULT_FORMAT,
        },
    },
    "required": ["prompt"],
}

GENERATE_IMAGE_UI_SCHEMA: Dict[str, Any] = {
    "format": {
        "ui:widget": "select",
        "ui:options": {
            "label": "Image Format",
            "position": "above-chat",
        },
    },
}


class ImageToolServer:
    """MCP server wiring for the generate_image tool. Holds no business logic."""

    def __init__(self, generator: Optional[ImageGenerator] = None):
        # Building the default client raises MissingAPIKeyError without a key
        self.generator = generator or ImageGenerator(AsyncTogetherClient())
        self.server = Server(SERVER_NAME, version=SERVER_VERSION)
        self.setup_handlers()

    def setup_handlers(self):
        """Register raw request handlers so McpError codes reach the client as protocol errors"""
        self.server.request_handlers[types.ListToolsRequest] = self._handle_list_tools
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    async def _handle_list_tools(self, request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=await self.list_tools()))

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        content = await self.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    async def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=GENERATE_IMAGE_TOOL,
                description="Generate an image using Together AI",
                inputSchema=GENERATE_IMAGE_SCHEMA,
                uiSchema=GENERATE_IMAGE_UI_SCHEMA,
            )
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        """
        Dispatch a tool call.

        Raises McpError with METHOD_NOT_FOUND for unknown tools, INVALID_PARAMS
        when validation fails (before anything is sent to the API) and
        INTERNAL_ERROR for any failure while generating or saving.
        """
        if name != GENERATE_IMAGE_TOOL:
            raise McpError(types.ErrorData(
                code=types.METHOD_NOT_FOUND,
                message=f"Unknown tool: {name}",
            ))

        try:
            request = ImageGenerationRequest.from_arguments(arguments)
        except InvalidArgumentsError as e:
            logger.warning(f"Rejected generate_image arguments: {e.errors}")
            raise McpError(types.ErrorData(
                code=types.INVALID_PARAMS,
                message=e.message,
            )) from e

        try:
            results = await self.generator.generate(request)
        except Exception as e:
            logger.error(f"Together AI API error: {e}", exc_info=True)
            raise McpError(types.ErrorData(
                code=types.INTERNAL_ERROR,
                message=f"Image generation failed: {str(e) or 'Unknown error'}",
            )) from e

        text = json.dumps([result.model_dump() for result in results], indent=2)
        return [types.TextContent(type="text", text=text)]

    async def run(self):
        """Serve MCP requests over stdin/stdout until the stream closes"""
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Together AI Image MCP server running on stdio")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def close(self):
        await self.generator.client.aclose()
