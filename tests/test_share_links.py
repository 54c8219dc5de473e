from utils.share_links import build_share_links, share_target_for


def test_builds_every_platform():
    links = build_share_links("https://example.com/a?b=c", "My code")
    assert set(links) == {"Facebook", "Twitter", "WhatsApp", "LinkedIn", "Email", "Instagram"}
    assert links["Facebook"] == "https://www.facebook.com/sharer/sharer.php?u=https%3A%2F%2Fexample.com%2Fa%3Fb%3Dc"
    assert links["Email"] == "mailto:?subject=My%20code&body=https%3A//example.com/a%3Fb%3Dc"
    assert links["Instagram"].startswith("instagram://library?AssetPath=https%3A%2F%2F")


def test_default_title():
    links = build_share_links("https://example.com")
    assert "Check+out+my+QR+Code" in links["Twitter"]


def test_share_target_prefers_public_viewer():
    record = {"id": "abc", "content": "hello"}
    assert share_target_for(record, "https://qr.example.com/") == "https://qr.example.com/qr/abc"
    assert share_target_for(record) == "hello"
