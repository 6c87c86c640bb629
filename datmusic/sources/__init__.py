from .base import BaseSource
from .page_parser import AudioPageParser
from .vk_audio import VkAudioSource

__all__ = [
    "AudioPageParser",
    "BaseSource",
    "VkAudioSource",
]
