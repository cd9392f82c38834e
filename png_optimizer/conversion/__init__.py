from .service import convert_task, encode_png
from .models import ConversionResult, ConversionTask, PngOptions, TaskStatus

__all__ = ["convert_task", "encode_png", "ConversionResult", "ConversionTask", "PngOptions", "TaskStatus"]
