"""
Input/Output Manager
Handles explicit, user-triggered saving and loading of a Project to text files.
Nothing in the engine persists on its own.
"""
import logging
import os

from .codec import decode, encode
from .project import Project

logger = logging.getLogger(__name__)


class IOManager:

    @staticmethod
    def save_project(project: Project, filepath: str) -> None:
        logger.info(f"Saving project to: {filepath}")
        try:
            document = encode(project)
            with open(filepath, "w", encoding="utf-8", newline="\n") as f:
                f.write(document)
            logger.info(f"Project saved ({len(project.strands)} strands, {len(document)} characters)")
        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise e

    @staticmethod
    def load_project(project: Project, filepath: str) -> None:
        """
        Replaces the content of `project` with the file's content.
        On any failure `project` is left unchanged.
        """
        logger.info(f"Loading project from: {filepath}")
        if not os.path.isfile(filepath):
            msg = f"File '{filepath}' does not exist."
            logger.error(msg)
            raise FileNotFoundError(msg)

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                loaded = decode(f.read())
        except Exception as e:
            logger.exception(f"Failed to load project: {e}")
            raise e

        project.replace_with(loaded)
        logger.info(f"Project loaded from: {filepath}")
