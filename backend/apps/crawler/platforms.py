# apps/crawler/platforms.py

"""
Platform signatures.

The table is ordered: the first platform with any marker present in the
lower-cased corpus wins. Some markers overlap (a WooCommerce shop is also a
WordPress site), which is why order matters.
"""

PLATFORM_SIGNATURES: list[tuple[str, tuple[str, ...]]] = [
    ("WordPress", ("wp-content", "wp-includes", "/wp-json/")),
    ("Joomla", ("/components/com_", "/media/jui/")),
    ("Shopify", ("cdn.shopify.com", "shopify-cdn", "myshopify.com")),
    ("Wix", ("wix.com", "parastorage.com", "wixsite.com")),
    ("Squarespace", ("squarespace-cdn.com", "static.squarespace.com")),
    ("Webflow", ("webflow.js", "assets.website-files.com")),
    ("Drupal", ("/sites/default/files/", "drupal.js", "drupal-settings-json")),
    ("Magento", ("/skin/frontend/", "mage/cookies")),
    ("Next.js", ("__next", "/_next/static/")),
    ("Nuxt.js", ("__nuxt", "/_nuxt/")),
    ("Vue.js", ("vue.js", "vue.min.js")),
]


def detect_platform(corpus: str, signatures=PLATFORM_SIGNATURES) -> str | None:
    """Return the first matching platform tag, or None."""
    haystack = (corpus or "").lower()
    for platform, markers in signatures:
        if any(marker in haystack for marker in markers):
            return platform
    return None
