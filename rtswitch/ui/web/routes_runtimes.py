"""
Runtime routes — catalog, install, switch and delete endpoints.

Blueprint: runtimes_bp
Prefix: /api

Thin HTTP wrappers over ``RuntimeManager``.

Endpoints:
    GET    /runtimes                              — registered kinds
    GET    /runtimes/<kind>/available             — installable releases
    GET    /runtimes/<kind>/installed             — installed + current
    GET    /runtimes/<kind>/check                 — reachable from PATH?
    POST   /runtimes/<kind>/install               — {version} or a full release
    POST   /runtimes/<kind>/use                   — {version}
    DELETE /runtimes/<kind>/versions/<version>    — delete (not the active one)
    POST   /runtimes/<kind>/purge                 — delete every version
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from rtswitch.core.errors import RuntimeSwitchError
from rtswitch.core.models.runtime import Release
from rtswitch.core.services.runtimes.orchestration.manager import RuntimeManager

logger = logging.getLogger(__name__)

runtimes_bp = Blueprint("runtimes", __name__)

# Error code → HTTP status
_STATUS_BY_CODE: dict[str, int] = {
    "unknown-kind": 404,
    "not-found": 404,
    "release-not-found": 404,
    "active-version-undeletable": 409,
    "incomplete-installation": 409,
    "no-active-version": 409,
    "network-error": 502,
    "parse-error": 502,
    "catalog-unavailable": 502,
}


def _manager() -> RuntimeManager:
    return current_app.config["RUNTIME_MANAGER"]


@runtimes_bp.errorhandler(RuntimeSwitchError)
def _runtime_error(exc: RuntimeSwitchError):  # type: ignore[no-untyped-def]
    status = _STATUS_BY_CODE.get(exc.code, 500)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.path, exc.message)
    return jsonify(exc.to_dict()), status


def _bad_request(message: str):  # type: ignore[no-untyped-def]
    return jsonify({"ok": False, "error": message, "code": "bad-request"}), 400


# ── Observe ─────────────────────────────────────────────────────────


@runtimes_bp.route("/runtimes")
def runtime_kinds():  # type: ignore[no-untyped-def]
    """Registered runtime kinds."""
    manager = _manager()
    return jsonify([
        {"kind": kind.value, "name": manager.adapter(kind).display_name}
        for kind in manager.adapters.kinds()
    ])


@runtimes_bp.route("/runtimes/<kind>/available")
def runtime_available(kind: str):  # type: ignore[no-untyped-def]
    """Installable releases for this host, newest first."""
    releases = _manager().list_available(kind)
    return jsonify([r.to_dict() for r in releases])


@runtimes_bp.route("/runtimes/<kind>/installed")
def runtime_installed(kind: str):  # type: ignore[no-untyped-def]
    return jsonify(_manager().list_installed(kind).to_dict())


@runtimes_bp.route("/runtimes/<kind>/check")
def runtime_check(kind: str):  # type: ignore[no-untyped-def]
    return jsonify(_manager().check_accessible(kind).to_dict())


# ── Act ─────────────────────────────────────────────────────────────


@runtimes_bp.route("/runtimes/<kind>/install", methods=["POST"])
def runtime_install(kind: str):  # type: ignore[no-untyped-def]
    """Install a release.

    Body is either ``{"version": "..."}`` (resolved against the live
    catalog) or a release as returned by ``available``
    (``{"version", "downloadUrl", "fileName"}``).  ``"use": true``
    activates the version afterwards.
    """
    manager = _manager()
    data = request.get_json(silent=True) or {}
    version = data.get("version")
    if not isinstance(version, str) or not version.strip():
        return _bad_request("Missing 'version'")

    if "downloadUrl" in data or "fileName" in data:
        try:
            release = Release.model_validate(
                {k: data[k] for k in ("version", "downloadUrl", "fileName") if k in data}
            )
        except ValidationError as e:
            return _bad_request(f"Invalid release: {e.errors()[0]['msg']}")
        adapter = manager.adapter(kind)
        if adapter.version_from_dir(adapter.version_dir_name(release.version)) is None:
            return _bad_request(f"Invalid {adapter.display_name} version: {release.version}")
    else:
        release = manager.find_release(kind, version)

    result = manager.install(kind, release)
    body = result.to_dict()
    if data.get("use"):
        body["activation"] = manager.activate(kind, release.version).to_dict()
    status = 201 if result.status == "installed" else 200
    return jsonify(body), status


@runtimes_bp.route("/runtimes/<kind>/use", methods=["POST"])
def runtime_use(kind: str):  # type: ignore[no-untyped-def]
    data = request.get_json(silent=True) or {}
    version = data.get("version")
    if not isinstance(version, str) or not version.strip():
        return _bad_request("Missing 'version'")
    return jsonify(_manager().activate(kind, version).to_dict())


@runtimes_bp.route("/runtimes/<kind>/versions/<path:version>", methods=["DELETE"])
def runtime_delete(kind: str, version: str):  # type: ignore[no-untyped-def]
    return jsonify(_manager().delete(kind, version).to_dict())


@runtimes_bp.route("/runtimes/<kind>/purge", methods=["POST"])
def runtime_purge(kind: str):  # type: ignore[no-untyped-def]
    return jsonify(_manager().purge(kind).to_dict())
