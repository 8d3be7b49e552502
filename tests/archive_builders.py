"""Helpers that build unit and module archives as bytes."""

import io
import zipfile


def zip_bytes(files: dict[str, bytes | str]) -> bytes:
    """Zip ``files`` (name -> content) in insertion order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def manifest_text(headers: dict[str, str]) -> str:
    return "".join(f"{name}: {value}\n" for name, value in headers.items())


def jar(headers: dict[str, str] | None = None) -> bytes:
    """Module archive bytes, with a META-INF/MANIFEST.MF when headers are given."""
    files: dict[str, bytes | str] = {"content.txt": "payload"}
    if headers is not None:
        files = {"META-INF/MANIFEST.MF": manifest_text({"Manifest-Version": "1.0", **headers}), **files}
    return zip_bytes(files)


def esa(
    entries: dict[str, bytes] | None = None,
    subsystem: dict[str, str] | None = None,
    deployment: dict[str, str] | None = None,
) -> bytes:
    """Unit archive bytes with optional subsystem and deployment manifests."""
    files: dict[str, bytes | str] = {}
    if subsystem is not None:
        files["OSGI-INF/SUBSYSTEM.MF"] = manifest_text(subsystem)
    if deployment is not None:
        files["OSGI-INF/DEPLOYMENT.MF"] = manifest_text(deployment)
    files.update(entries or {})
    return zip_bytes(files)
