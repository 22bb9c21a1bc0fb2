import httpx

ERROR_BODY_LIMIT = 500


def _escape_graphql_search_value(value: str) -> str:
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def _file_node_url(node: dict | None) -> str | None:
    """Pull the public URL out of a MediaImage or GenericFile node."""
    n = node or {}
    image = n.get("image") or {}
    return image.get("url") or n.get("url") or None


class ShopifyAPIError(Exception):
    """Non-success answer from the Shopify Admin API (HTTP status or GraphQL errors)."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = (body or "")[:ERROR_BODY_LIMIT]

    @property
    def detail(self) -> str:
        if self.status_code is None:
            return str(self)
        return f"Shopify {self.status_code}: {self.body or '<empty>'}"


class ShopifyClient:
    def __init__(self, store_domain: str, admin_token: str, api_version: str = "2024-10", timeout: float = 60):
        self.domain = store_domain
        self.token = admin_token
        self.api_version = api_version
        self.timeout = timeout
        self.base = f"https://{self.domain}/admin/api/{self.api_version}"
        self.headers = {
            "X-Shopify-Access-Token": self.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def article_url(self, blog_handle: str | None, handle: str | None) -> str | None:
        if not blog_handle or not handle:
            return None
        return f"https://{self.domain}/blogs/{blog_handle}/{handle}"

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base}/{path.lstrip('/')}"
        with httpx.Client(timeout=self.timeout) as client:
            r = client.request(method, url, headers=self.headers, **kwargs)
        if not r.is_success:
            raise ShopifyAPIError(
                f"{method} {path} failed with {r.status_code}",
                status_code=r.status_code,
                body=r.text,
            )
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError:
            return {}

    def _graphql(self, query: str, variables: dict) -> dict:
        body = self._request("POST", "/graphql.json", json={"query": query, "variables": variables})
        if body.get("errors"):
            errors = body["errors"]
            if isinstance(errors, list):
                messages = ", ".join(e.get("message", "Unknown GraphQL error") for e in errors)
            else:
                messages = str(errors)
            raise ShopifyAPIError(messages)
        return body.get("data") or {}

    @staticmethod
    def _raise_user_errors(payload: dict):
        user_errors = payload.get("userErrors") or []
        if user_errors:
            msg = "; ".join(e.get("message", "Unknown user error") for e in user_errors)
            raise ShopifyAPIError(msg)

    # --- REST files ---

    def create_file(self, attachment_b64: str, filename: str) -> dict:
        """Create a file from a base64 attachment. Returns the raw response body."""
        return self._request(
            "POST",
            "/files.json",
            json={"file": {"attachment": attachment_b64, "filename": filename}},
        )

    def list_files(self, limit: int = 25) -> list[dict]:
        data = self._request(
            "GET",
            "/files.json",
            params={"limit": min(limit, 250), "fields": "filename,url,created_at,updated_at"},
        )
        files = data.get("files")
        return files if isinstance(files, list) else []

    # --- GraphQL staged uploads ---

    def staged_uploads_create(self, filename: str, mime_type: str, file_size: int) -> dict:
        """Ask Shopify for a one-time upload target. Returns ``{url, resourceUrl, parameters}``."""
        mutation = """
        mutation StagedUploadsCreate($input: [StagedUploadInput!]!) {
          stagedUploadsCreate(input: $input) {
            stagedTargets {
              url
              resourceUrl
              parameters {
                name
                value
              }
            }
            userErrors {
              field
              message
            }
          }
        }
        """
        data = self._graphql(
            mutation,
            {
                "input": [
                    {
                        "resource": "IMAGE",
                        "filename": filename,
                        "mimeType": mime_type,
                        "httpMethod": "POST",
                        "fileSize": str(file_size),
                    }
                ]
            },
        )
        payload = data.get("stagedUploadsCreate") or {}
        self._raise_user_errors(payload)
        targets = payload.get("stagedTargets") or []
        if not targets or not targets[0].get("url"):
            raise ShopifyAPIError("stagedUploadsCreate returned no upload target")
        return targets[0]

    def upload_to_staged_target(self, target: dict, filename: str, data: bytes, mime_type: str) -> None:
        """POST the raw bytes as multipart form to the staged target (not the Admin API)."""
        form = {p["name"]: p["value"] for p in (target.get("parameters") or []) if p.get("name")}
        with httpx.Client(timeout=self.timeout) as client:
            r = client.post(target["url"], data=form, files={"file": (filename, data, mime_type)})
        if not r.is_success:
            raise ShopifyAPIError(
                f"Staged upload failed with {r.status_code}",
                status_code=r.status_code,
                body=r.text,
            )

    def file_create(self, original_source: str, alt: str = "", content_type: str = "IMAGE") -> dict:
        """Register a staged resource as a Shopify file. Returns ``{id, fileStatus, url}``."""
        mutation = """
        mutation FileCreate($files: [FileCreateInput!]!) {
          fileCreate(files: $files) {
            files {
              id
              fileStatus
              ... on MediaImage {
                image {
                  url
                }
              }
              ... on GenericFile {
                url
              }
            }
            userErrors {
              field
              message
            }
          }
        }
        """
        data = self._graphql(
            mutation,
            {"files": [{"alt": alt, "contentType": content_type, "originalSource": original_source}]},
        )
        payload = data.get("fileCreate") or {}
        self._raise_user_errors(payload)
        files = payload.get("files") or []
        node = files[0] if files else {}
        return {"id": node.get("id"), "fileStatus": node.get("fileStatus"), "url": _file_node_url(node)}

    def find_file_by_name(self, filename: str) -> str | None:
        query = """
        query FileByName($query: String!) {
          files(first: 10, query: $query, sortKey: CREATED_AT, reverse: true) {
            nodes {
              ... on MediaImage {
                image {
                  url
                }
              }
              ... on GenericFile {
                url
              }
            }
          }
        }
        """
        data = self._graphql(query, {"query": f"filename:'{_escape_graphql_search_value(filename)}'"})
        nodes = (((data.get("files") or {}).get("nodes")) or [])
        for node in nodes:
            url = _file_node_url(node)
            if url:
                return url
        return None

    # --- Articles ---

    def create_article(self, blog_id: str, article: dict) -> dict:
        data = self._request("POST", f"/blogs/{blog_id}/articles.json", json={"article": article})
        return data.get("article") or {}

    def create_metafield(self, article_id, namespace: str, key: str, value: str,
                         field_type: str = "single_line_text_field") -> dict:
        payload = {
            "metafield": {
                "namespace": namespace,
                "key": key,
                "type": field_type,
                "value": value,
            }
        }
        data = self._request("POST", f"/articles/{article_id}/metafields.json", json=payload)
        return data.get("metafield") or {}
