"""Web fetch tool"""

import re

import httpx
from .base import Tool

MAX_CHARS = 10000


def strip_html(html: str) -> str:
    text = re.sub(r"<script[^>]*>[\s\S]*?</script>", "", html, flags=re.IGNORECASE)
    text = re.sub(r"<style[^>]*>[\s\S]*?</style>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    return re.sub(r"\s+", " ", text).strip()


class WebFetchTool(Tool):
    name = "web_fetch"
    description = "Fetch content from a URL. Returns the text content of the webpage."

    def get_parameters_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "The URL to fetch",
                },
            },
            "required": ["url"],
        }

    async def execute(self, args: dict, context: dict) -> str:
        url = args["url"]

        try:
            async with httpx.AsyncClient(timeout=10.0, follow_redirects=True) as client:
                response = await client.get(
                    url,
                    headers={"User-Agent": "Mozilla/5.0 (compatible; ZesbeCLI/1.0)"},
                )
        except httpx.TimeoutException:
            return "Error: Request timeout"
        except httpx.HTTPError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Error: HTTP {response.status_code}"

        content_type = response.headers.get("content-type", "")
        text = strip_html(response.text) if "html" in content_type else response.text.strip()
        return text[:MAX_CHARS] or "No content found"
