from .image_tool_server import ImageToolServer, GENERATE_IMAGE_TOOL

__all__ = ['ImageToolServer', 'GENERATE_IMAGE_TOOL']
