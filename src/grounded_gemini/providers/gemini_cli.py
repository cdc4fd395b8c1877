"""Cloud Code Assist endpoint used by the Gemini CLI OAuth flow."""

from grounded_gemini.providers.base import InternalEndpointConfig


class GeminiCLIConfig(InternalEndpointConfig):
    name = "google-gemini-cli"
    search_tool = "googleSearch"
    url_context_tool = "urlContext"
    user_agent = "google-cloud-sdk vscode_cloudshelleditor/0.1"
