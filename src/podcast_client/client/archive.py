"""Default builder for the zip uploaded to the production service.

The archive holds the three media files next to a ``manifest.xml``::

    <podcast uid="..." title="...">
      <description>...</description>
      <introduction src="intro.mp3"/>
      <interview src="interview.mp3"/>
      <photo src="photo.jpg"/>
    </podcast>
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Union
from xml.etree import ElementTree

from podcast_client.client.errors import ArchiveError

LOGGER = logging.getLogger("podcast_client.archive")
MANIFEST_NAME = "manifest.xml"

PathArg = Union[str, "PathLike[str]"]


def media_extension(path: PathArg) -> str:
    return Path(path).suffix.lstrip(".").lower()


@dataclass(frozen=True)
class ProductionRequest:
    job_id: str
    title: str
    description: str
    intro: Path
    interview: Path
    photo: Path

    def validate(self) -> None:
        """Raise :class:`ArchiveError` unless the inputs can be archived."""
        for role in ("intro", "interview", "photo"):
            path = Path(getattr(self, role))
            if not path.is_file():
                raise ArchiveError(f"The {role} file {path} does not exist")
        intro_ext = media_extension(self.intro)
        interview_ext = media_extension(self.interview)
        if not intro_ext or not interview_ext:
            raise ArchiveError("The introduction and interview files need an extension")
        if intro_ext != interview_ext:
            raise ArchiveError(
                f"The introduction file type ({intro_ext}) and the interview file type "
                f"({interview_ext}) must be the same"
            )

    @property
    def ready(self) -> bool:
        if not self.description.strip():
            return False
        try:
            self.validate()
        except ArchiveError:
            return False
        return True


def _entry_name(role: str, path: Path) -> str:
    suffix = path.suffix.lower()
    return f"{role}{suffix}"


def build_manifest(request: ProductionRequest) -> bytes:
    root = ElementTree.Element("podcast", {"uid": request.job_id, "title": request.title})
    ElementTree.SubElement(root, "description").text = request.description
    for role in ("introduction", "interview", "photo"):
        path = Path(getattr(request, "intro" if role == "introduction" else role))
        ElementTree.SubElement(root, role, {"src": _entry_name(role, path)})
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


class PodcastArchiveBuilder:
    """Writes a :class:`ProductionRequest` into a zip at ``destination``."""

    def build(
        self,
        destination: PathArg,
        job_id: str,
        title: str,
        description: str,
        intro: PathArg,
        interview: PathArg,
        photo: PathArg,
    ) -> Path:
        request = ProductionRequest(
            job_id=job_id,
            title=title,
            description=description,
            intro=Path(intro),
            interview=Path(interview),
            photo=Path(photo),
        )
        request.validate()
        target = Path(destination)
        try:
            with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                zf.writestr(MANIFEST_NAME, build_manifest(request))
                zf.write(request.intro, _entry_name("introduction", request.intro))
                zf.write(request.interview, _entry_name("interview", request.interview))
                zf.write(request.photo, _entry_name("photo", request.photo))
        except OSError as exc:
            raise ArchiveError(f"Could not write archive {target}: {exc}") from exc
        LOGGER.debug("Built archive %s for %s (%d bytes)", target, job_id, target.stat().st_size)
        return target


__all__ = ["MANIFEST_NAME", "ProductionRequest", "PodcastArchiveBuilder", "build_manifest", "media_extension"]
