from urllib.parse import quote, urlencode


DEFAULT_SHARE_TITLE = "Check out my QR Code"


def build_share_links(url, title=""):
    """
    Build the share targets offered for a QR code.
    Returns dict: platform name -> link.
    """
    link = (url or "").strip()
    title = (title or "").strip() or DEFAULT_SHARE_TITLE

    return {
        "Facebook": "https://www.facebook.com/sharer/sharer.php?" + urlencode({"u": link}),
        "Twitter": "https://twitter.com/intent/tweet?" + urlencode({"url": link, "text": title}),
        "WhatsApp": "https://api.whatsapp.com/send?" + urlencode({"text": f"{title} {link}"}),
        "LinkedIn": "https://www.linkedin.com/sharing/share-offsite/?" + urlencode({"url": link}),
        "Email": f"mailto:?subject={quote(title)}&body={quote(link)}",
        "Instagram": f"instagram://library?AssetPath={quote(link, safe='')}",
    }


def share_target_for(record, public_base_url=""):
    """Pick the URL to share for *record*: the public viewer page when one is
    configured, otherwise the encoded content itself."""
    if public_base_url:
        return f"{public_base_url.rstrip('/')}/qr/{record['id']}"
    return record.get("content", "")
