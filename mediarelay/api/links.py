"""
Short Link Endpoint

GET /r/<link_id> always answers with a redirect: to the viewer page
carrying the signed URL, or to the expired page with a reason.
"""

from urllib.parse import quote, urlencode

from flask import Blueprint, current_app, redirect

from mediarelay.domain.links.services import LinkResolver
from mediarelay.domain.links.value_objects import ResolutionStatus

links_bp = Blueprint("links", __name__)


@links_bp.route("/r/<link_id>", methods=["GET"])
def resolve_link(link_id):
    config = current_app.relay_config
    resolver = current_app.container.resolve(LinkResolver)

    resolution = resolver.resolve(link_id)

    if resolution.status is ResolutionStatus.RESOLVED:
        current_app.logger.debug(f"[RESOLVE] Redirecting {link_id[:8]} to viewer")
        return redirect(f"{config.viewer_path}?file={quote(resolution.signed_url, safe='')}", code=302)

    current_app.logger.info(f"[RESOLVE] {link_id[:8]} -> {resolution.status.value}")
    query = urlencode({"reason": resolution.status.value, "ttl": config.link_ttl_hours})
    return redirect(f"{config.expired_path}?{query}", code=302)
