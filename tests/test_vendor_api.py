"""Тесты VendorClient (контракт URL/параметров и разбор ответов без сети)."""

from __future__ import annotations

import unittest

from morabot.core.exceptions import UpstreamError
from morabot.core.vendor_api import (
    VendorClient,
    clean_username,
    extract_slideshow_images,
    normalize_device,
)

SLIDESHOW_HTML = """
<html><body>
  <div class="col-md-12"><img src="https://cdn.example/1.jpg"></div>
  <div class="col-md-12"><img src="/relative.jpg"></div>
  <div class="col-md-12"><span><img src="https://cdn.example/nested.jpg"></span></div>
  <div class="col-md-12"><img src="https://cdn.example/2.jpg"></div>
</body></html>
"""


class SpyVendorClient(VendorClient):
    """Тестовый клиент: перехватывает вызовы _request без сети."""

    def __init__(self, responses: dict | None = None) -> None:
        super().__init__(base_url="https://vendor.local/api", apify_key="apify-token")
        self.responses = responses or {}
        self.calls: list[dict] = []

    async def _request(self, method, url, **kwargs):  # type: ignore[override]
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        return response


class VendorHelpersTests(unittest.TestCase):
    def test_normalize_device(self) -> None:
        self.assertEqual(normalize_device("Mobile"), "mobile")
        self.assertEqual(normalize_device("tablet"), "tablet")
        self.assertEqual(normalize_device("watch"), "desktop")
        self.assertEqual(normalize_device(None), "desktop")

    def test_clean_username(self) -> None:
        self.assertEqual(clean_username("@rizky.cyber"), "rizky.cyber")
        self.assertEqual(clean_username(" user "), "user")

    def test_extract_slideshow_images(self) -> None:
        self.assertEqual(
            extract_slideshow_images(SLIDESHOW_HTML),
            ["https://cdn.example/1.jpg", "https://cdn.example/2.jpg"],
        )
        self.assertEqual(extract_slideshow_images(""), [])

    def test_qr_code_url_encodes_data(self) -> None:
        url = VendorClient.qr_code_url("a b&c")
        self.assertTrue(url.startswith("https://api.qrserver.com/v1/create-qr-code/?size=400x400&data="))
        self.assertTrue(url.endswith("a%20b%26c"))


class VendorClientTests(unittest.IsolatedAsyncioTestCase):
    async def test_pinterest_search(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/pinterest": {"result": ["u1", "u2", 3]}})
        self.assertEqual(await client.pinterest_search("cats"), ["u1", "u2"])
        call = client.calls[-1]
        self.assertEqual(call["method"], "GET")
        self.assertEqual(call["params"], {"query": "cats"})
        self.assertEqual(call["timeout"], 10)

    async def test_pinterest_empty(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/pinterest": {"result": None}})
        self.assertEqual(await client.pinterest_search("cats"), [])

    async def test_instagram_prefers_video(self) -> None:
        client = SpyVendorClient({
            "https://vendor.local/api/download/instagram2": {
                "result": {
                    "title": "Reel",
                    "media": [
                        {"type": "image", "url": "https://img"},
                        {"type": "video", "url": "https://vid"},
                    ],
                }
            }
        })
        media = await client.instagram_media("https://instagram.com/reel/x")
        self.assertEqual(media, {"type": "video", "url": "https://vid", "title": "Reel"})

    async def test_instagram_no_media(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/download/instagram2": {"result": {"media": []}}})
        self.assertIsNone(await client.instagram_media("https://instagram.com/p/x"))

    async def test_instagram_non_dict_result(self) -> None:
        for body in ({"result": ["not", "a", "dict"]}, {"result": "oops"}, ["raw"]):
            client = SpyVendorClient({"https://vendor.local/api/download/instagram2": body})
            self.assertIsNone(await client.instagram_media("https://instagram.com/p/x"))

    async def test_youtube_video_payload(self) -> None:
        url = "https://api.apify.com/v2/acts/streamers~youtube-video-downloader/run-sync-get-dataset-items"
        client = SpyVendorClient({url: [{"url": "https://video.mp4", "title": "Clip"}]})
        result = await client.youtube_video("https://youtu.be/abc")
        self.assertEqual(result, {"url": "https://video.mp4", "title": "Clip"})
        call = client.calls[-1]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["json_body"], {"videos": [{"url": "https://youtu.be/abc"}]})
        self.assertEqual(call["params"], {"token": "apify-token"})
        self.assertEqual(call["timeout"], 60)

    async def test_youtube_audio_builds_search_url(self) -> None:
        url = "https://api.apify.com/v2/acts/scrapearchitect~youtube-audio-mp3-downloader/run-sync-get-dataset-items"
        client = SpyVendorClient({url: {"items": [{"audio_url": "https://a.mp3", "title": "Song"}]}})
        result = await client.youtube_audio("lofi beats")
        self.assertEqual(result, {"url": "https://a.mp3", "title": "Song"})
        payload = client.calls[-1]["json_body"]
        self.assertEqual(
            payload,
            {"video_urls": [{"url": "https://www.youtube.com/results?search_query=lofi%20beats"}]},
        )

    async def test_youtube_audio_without_items(self) -> None:
        url = "https://api.apify.com/v2/acts/scrapearchitect~youtube-audio-mp3-downloader/run-sync-get-dataset-items"
        client = SpyVendorClient({url: []})
        self.assertIsNone(await client.youtube_audio("nothing"))

    async def test_screenshot_normalizes_device(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/ssweb": b"\x89PNG"})
        self.assertEqual(await client.screenshot("https://github.com", "fridge"), b"\x89PNG")
        call = client.calls[-1]
        self.assertEqual(call["params"], {"url": "https://github.com", "type": "desktop"})
        self.assertEqual(call["expect"], "bytes")

    async def test_tiktok_video_form_post(self) -> None:
        client = SpyVendorClient({"https://tikwm.com/api/": {"data": {"play": "https://play.mp4", "title": "T"}}})
        result = await client.tiktok_video("https://vt.tiktok.com/x")
        self.assertEqual(result, {"url": "https://play.mp4", "title": "T"})
        call = client.calls[-1]
        self.assertEqual(call["form"], {"url": "https://vt.tiktok.com/x", "hd": "1"})
        self.assertEqual(call["headers"]["Cookie"], "current_language=en")

    async def test_tiktok_video_without_play(self) -> None:
        client = SpyVendorClient({"https://tikwm.com/api/": {"data": {}}})
        self.assertIsNone(await client.tiktok_video("https://vt.tiktok.com/x"))

    async def test_tiktok_slideshow(self) -> None:
        client = SpyVendorClient({"https://dlpanda.com/id": SLIDESHOW_HTML})
        images = await client.tiktok_slideshow("https://www.tiktok.com/@u/photo/1")
        self.assertEqual(len(images), 2)
        self.assertEqual(client.calls[-1]["expect"], "text")

    async def test_random_adult_video_list_and_object(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/hentaivid": {"result": [{"video_2": "https://v2"}]}})
        self.assertEqual(await client.random_adult_video(), "https://v2")
        self.assertEqual(client.calls[-1]["timeout"], 15)

        client = SpyVendorClient({"https://vendor.local/api/hentaivid": {"result": {"url": "https://single"}}})
        self.assertEqual(await client.random_adult_video(), "https://single")

        client = SpyVendorClient({"https://vendor.local/api/hentaivid": {"result": []}})
        self.assertIsNone(await client.random_adult_video())

    async def test_sfile_search(self) -> None:
        items = [{"title": f"f{i}", "size": "1 MB", "link": f"https://s/{i}"} for i in range(12)]
        client = SpyVendorClient({"https://vendor.local/api/sfile-search": {"result": items}})
        self.assertEqual(len(await client.sfile_search("apk")), 12)

    async def test_tiktok_profile(self) -> None:
        client = SpyVendorClient({
            "https://vendor.local/api/tiktokStalk": {
                "result": {
                    "user": {"uniqueId": "u", "avatarMedium": "https://avatar"},
                    "statsV2": {"followerCount": "10"},
                }
            }
        })
        profile = await client.tiktok_profile("@u")
        self.assertEqual(profile["avatar"], "https://avatar")
        self.assertEqual(profile["stats"], {"followerCount": "10"})
        self.assertEqual(client.calls[-1]["params"], {"query": "u"})

    async def test_tiktok_profile_missing_user(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/tiktokStalk": {"result": {}}})
        self.assertIsNone(await client.tiktok_profile("ghost"))

    async def test_random_image_swallows_upstream_error(self) -> None:
        client = SpyVendorClient({"https://api.waifu.pics/sfw/neko": UpstreamError("HTTP 500", status=500)})
        self.assertIsNone(await client.random_image())

        client = SpyVendorClient({"https://api.waifu.pics/sfw/neko": {"url": "https://neko.png"}})
        self.assertEqual(await client.random_image(), "https://neko.png")

    async def test_upstream_error_propagates(self) -> None:
        client = SpyVendorClient({"https://vendor.local/api/sfile-search": UpstreamError("timeout")})
        with self.assertRaises(UpstreamError):
            await client.sfile_search("x")
