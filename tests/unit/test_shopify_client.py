"""
Unit tests for ShopifyClient service.
"""
import json

import httpx
import pytest
import respx

from brickart.services.shopify_client import ShopifyAPIError, ShopifyClient

BASE = "https://test-store.myshopify.com/admin/api/2024-10"


@pytest.mark.unit
class TestShopifyClient:
    """Tests for ShopifyClient API integration."""

    def test_client_initialization(self):
        client = ShopifyClient(
            store_domain="test-store.myshopify.com",
            admin_token="test_token",
            api_version="2024-10"
        )

        assert client.domain == "test-store.myshopify.com"
        assert client.base == BASE
        assert client.headers["X-Shopify-Access-Token"] == "test_token"

    def test_client_initialization_default_api_version(self):
        client = ShopifyClient(store_domain="test-store.myshopify.com", admin_token="test_token")

        assert client.api_version == "2024-10"

    def test_article_url_generation(self, shopify_client):
        url = shopify_client.article_url("gallery", "ada-animals")

        assert url == "https://test-store.myshopify.com/blogs/gallery/ada-animals"

    @pytest.mark.parametrize("blog_handle,handle", [(None, "x"), ("gallery", None), ("", ""), ("gallery", "")])
    def test_article_url_requires_both_handles(self, shopify_client, blog_handle, handle):
        assert shopify_client.article_url(blog_handle, handle) is None

    @respx.mock
    def test_create_article_wraps_payload(self, shopify_client):
        route = respx.post(f"{BASE}/blogs/42/articles.json").mock(
            return_value=httpx.Response(201, json={"article": {"id": 7, "handle": "h"}})
        )

        article = shopify_client.create_article("42", {"title": "T"})

        assert article == {"id": 7, "handle": "h"}
        payload = json.loads(route.calls.last.request.content)
        assert payload == {"article": {"title": "T"}}

    @respx.mock
    def test_non_success_raises_with_truncated_body(self, shopify_client):
        respx.post(f"{BASE}/blogs/42/articles.json").mock(
            return_value=httpx.Response(422, text="x" * 2000)
        )

        with pytest.raises(ShopifyAPIError) as exc_info:
            shopify_client.create_article("42", {"title": "T"})

        err = exc_info.value
        assert err.status_code == 422
        assert len(err.body) == 500
        assert err.detail.startswith("Shopify 422: xxx")

    @respx.mock
    def test_create_file_posts_attachment(self, shopify_client):
        route = respx.post(f"{BASE}/files.json").mock(
            return_value=httpx.Response(201, json={"file": {"url": "https://cdn/x.png"}})
        )

        body = shopify_client.create_file("QUJD", "a.png")

        assert body["file"]["url"] == "https://cdn/x.png"
        sent = json.loads(route.calls.last.request.content)
        assert sent == {"file": {"attachment": "QUJD", "filename": "a.png"}}
        assert route.calls.last.request.headers["X-Shopify-Access-Token"] == "test_shopify_token"

    @respx.mock
    def test_list_files_requests_fields(self, shopify_client):
        route = respx.get(f"{BASE}/files.json").mock(
            return_value=httpx.Response(200, json={"files": [{"filename": "a.png", "url": "u"}]})
        )

        files = shopify_client.list_files()

        assert files == [{"filename": "a.png", "url": "u"}]
        params = route.calls.last.request.url.params
        assert params["limit"] == "25"
        assert params["fields"] == "filename,url,created_at,updated_at"

    @respx.mock
    def test_graphql_errors_raise(self, shopify_client):
        respx.post(f"{BASE}/graphql.json").mock(
            return_value=httpx.Response(200, json={"errors": [{"message": "Access denied"}]})
        )

        with pytest.raises(ShopifyAPIError, match="Access denied"):
            shopify_client.find_file_by_name("a.png")

    @respx.mock
    def test_staged_uploads_create_returns_target(self, shopify_client):
        target = {"url": "https://storage.example/upload", "resourceUrl": "https://storage.example/r/1",
                  "parameters": [{"name": "key", "value": "tmp/1"}]}
        route = respx.post(f"{BASE}/graphql.json").mock(
            return_value=httpx.Response(200, json={"data": {"stagedUploadsCreate": {
                "stagedTargets": [target], "userErrors": []}}})
        )

        result = shopify_client.staged_uploads_create("a.png", "image/png", 123)

        assert result == target
        variables = json.loads(route.calls.last.request.content)["variables"]
        assert variables["input"][0] == {
            "resource": "IMAGE", "filename": "a.png", "mimeType": "image/png",
            "httpMethod": "POST", "fileSize": "123",
        }

    @respx.mock
    def test_staged_uploads_user_errors_raise(self, shopify_client):
        respx.post(f"{BASE}/graphql.json").mock(
            return_value=httpx.Response(200, json={"data": {"stagedUploadsCreate": {
                "stagedTargets": [], "userErrors": [{"field": ["input"], "message": "Bad mime"}]}}})
        )

        with pytest.raises(ShopifyAPIError, match="Bad mime"):
            shopify_client.staged_uploads_create("a.png", "image/png", 1)

    @respx.mock
    def test_upload_to_staged_target_sends_multipart(self, shopify_client):
        route = respx.post("https://storage.example/upload").mock(return_value=httpx.Response(204))
        target = {"url": "https://storage.example/upload", "parameters": [{"name": "key", "value": "tmp/1"}]}

        shopify_client.upload_to_staged_target(target, "a.png", b"\x89PNGdata", "image/png")

        request = route.calls.last.request
        assert "multipart/form-data" in request.headers["Content-Type"]
        content = request.read()
        assert b'name="key"' in content
        assert b"tmp/1" in content
        assert b"\x89PNGdata" in content
        assert "X-Shopify-Access-Token" not in request.headers

    @respx.mock
    def test_file_create_reads_media_image_url(self, shopify_client):
        respx.post(f"{BASE}/graphql.json").mock(
            return_value=httpx.Response(200, json={"data": {"fileCreate": {
                "files": [{"id": "gid://shopify/MediaImage/1", "fileStatus": "READY",
                           "image": {"url": "https://cdn/a.png"}}],
                "userErrors": []}}})
        )

        created = shopify_client.file_create("https://storage.example/r/1")

        assert created == {"id": "gid://shopify/MediaImage/1", "fileStatus": "READY", "url": "https://cdn/a.png"}

    @respx.mock
    def test_find_file_by_name_returns_first_url(self, shopify_client):
        route = respx.post(f"{BASE}/graphql.json").mock(
            return_value=httpx.Response(200, json={"data": {"files": {"nodes": [
                {"image": None}, {"image": {"url": "https://cdn/b.png"}}]}}})
        )

        url = shopify_client.find_file_by_name("b.png")

        assert url == "https://cdn/b.png"
        variables = json.loads(route.calls.last.request.content)["variables"]
        assert variables == {"query": "filename:'b.png'"}

    @respx.mock
    def test_create_metafield_payload(self, shopify_client):
        route = respx.post(f"{BASE}/articles/7/metafields.json").mock(
            return_value=httpx.Response(201, json={"metafield": {"id": 1}})
        )

        shopify_client.create_metafield(7, "brickart", "submitter_email", "a@b.c")

        sent = json.loads(route.calls.last.request.content)
        assert sent == {"metafield": {"namespace": "brickart", "key": "submitter_email",
                                      "type": "single_line_text_field", "value": "a@b.c"}}
