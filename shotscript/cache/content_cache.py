import json
import os
import re
import shutil
from enum import Enum
from typing import Any, Dict, List, Optional
from loguru import logger


class ArtifactCategory(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    METADATA = "metadata"
    KEYFRAMES = "keyframes"
    VISUAL = "visual"
    ASR = "asr"


# Directory holding each category, relative to the cache root
_CATEGORY_DIRS = {
    ArtifactCategory.VIDEO: "videos",
    ArtifactCategory.AUDIO: "audio",
    ArtifactCategory.KEYFRAMES: "keyframes",
    ArtifactCategory.METADATA: "analysis",
    ArtifactCategory.VISUAL: "analysis",
    ArtifactCategory.ASR: "analysis",
}

_VIDEO_EXTENSION = ".mp4"
_AUDIO_EXTENSION = ".mp3"
_FRAME_EXTENSION = ".jpg"
_KEYFRAME_MANIFEST = "keyframes.json"
_FRAME_INDEX = re.compile(r"(\d+)$")

# Artifacts that together make a reusable acquisition result
COMPLETE_ENTRY = (ArtifactCategory.VIDEO, ArtifactCategory.AUDIO, ArtifactCategory.METADATA)


class ContentCache:
    """
    On-disk, URL-keyed store for every artifact the pipeline produces.

    Layout under ``root``::

        videos/<key>.mp4
        audio/<key>.mp3
        keyframes/<key>/frame_000001.jpg ...
        keyframes/<key>/keyframes.json
        analysis/<key>-metadata.json
        analysis/<key>-visual.json
        analysis/<key>-asr.json

    There is no locking; concurrent writers for one key race and the last one wins.
    Filesystem errors propagate to the caller.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        self._ensure_dirs()

    def _ensure_dirs(self):
        for dir_name in sorted(set(_CATEGORY_DIRS.values())):
            os.makedirs(os.path.join(self.root, dir_name), exist_ok=True)

    def category_dir(self, category: ArtifactCategory) -> str:
        return os.path.join(self.root, _CATEGORY_DIRS[ArtifactCategory(category)])

    def resolve(self, key: str, category: ArtifactCategory) -> str:
        """Path of the artifact for ``key`` in ``category``. Pure; touches no files."""
        category = ArtifactCategory(category)
        base = self.category_dir(category)
        if category is ArtifactCategory.VIDEO:
            return os.path.join(base, f"{key}{_VIDEO_EXTENSION}")
        if category is ArtifactCategory.AUDIO:
            return os.path.join(base, f"{key}{_AUDIO_EXTENSION}")
        if category is ArtifactCategory.KEYFRAMES:
            return os.path.join(base, key)
        return os.path.join(base, f"{key}-{category.value}.json")

    def keyframe_dir(self, key: str) -> str:
        return self.resolve(key, ArtifactCategory.KEYFRAMES)

    def exists(self, key: str, category: ArtifactCategory) -> bool:
        path = self.resolve(key, category)
        if ArtifactCategory(category) is ArtifactCategory.KEYFRAMES:
            return bool(self.list_keyframes(key))
        return os.path.isfile(path)

    def has_complete(self, key: str) -> bool:
        """True only when video, audio and metadata are all present for ``key``."""
        missing = [c.value for c in COMPLETE_ENTRY if not self.exists(key, c)]
        if missing:
            logger.debug(f"Cache entry {key} incomplete, missing: {missing}")
            return False
        return True

    def list_keyframes(self, key: str) -> List[str]:
        """Keyframe image paths in frame-number order (the trailing digits of each name)."""
        directory = self.keyframe_dir(key)
        if not os.path.isdir(directory):
            return []
        names = [
            name for name in os.listdir(directory)
            if name.endswith(_FRAME_EXTENSION) and os.path.isfile(os.path.join(directory, name))
        ]
        return [os.path.join(directory, name) for name in sorted(names, key=_frame_sort_key)]

    def read_keyframe_manifest(self, key: str) -> Optional[Dict[str, Any]]:
        """Extraction parameters stored beside the frames, or None if absent or unreadable."""
        return self._load_json(os.path.join(self.keyframe_dir(key), _KEYFRAME_MANIFEST))

    def write_keyframe_manifest(self, key: str, payload: Dict[str, Any]) -> str:
        path = os.path.join(self.keyframe_dir(key), _KEYFRAME_MANIFEST)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return path

    def reset_keyframe_dir(self, key: str) -> str:
        directory = self.keyframe_dir(key)
        if os.path.isdir(directory):
            shutil.rmtree(directory)
        os.makedirs(directory)
        return directory

    def read_json(self, key: str, category: ArtifactCategory) -> Optional[Dict[str, Any]]:
        """Stored payload, or None when the file is missing or not a readable JSON object."""
        return self._load_json(self.resolve(key, category))

    @staticmethod
    def _load_json(path: str) -> Optional[Dict[str, Any]]:
        if not os.path.isfile(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except ValueError as e:
                # A half-written file from an interrupted run reads as a miss
                logger.warning(f"Ignoring unreadable cache file {path}: {e}")
                return None
        if not isinstance(payload, dict):
            logger.warning(f"Ignoring cache file {path}: expected an object, got {type(payload).__name__}")
            return None
        return payload

    def write_json(self, key: str, category: ArtifactCategory, payload: Dict[str, Any]) -> str:
        path = self.resolve(key, category)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        return path

    def clear(self, key: Optional[str] = None):
        """Remove one key's artifacts, or the whole cache when ``key`` is None."""
        if key is None:
            logger.info(f"Clearing entire cache at {self.root}")
            for dir_name in sorted(set(_CATEGORY_DIRS.values())):
                path = os.path.join(self.root, dir_name)
                if os.path.isdir(path):
                    shutil.rmtree(path)
        else:
            logger.info(f"Clearing cache entry {key}")
            for category in ArtifactCategory:
                path = self.resolve(key, category)
                if os.path.isdir(path):
                    shutil.rmtree(path)
                elif os.path.exists(path):
                    os.remove(path)
        self._ensure_dirs()


def _frame_sort_key(name: str):
    match = _FRAME_INDEX.search(os.path.splitext(name)[0])
    return (int(match.group(1)) if match else -1, name)
