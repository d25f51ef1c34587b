import html
from typing import Optional

# Error bodies can be whole HTML pages; keep admin messages well under Telegram's limit.
MAX_BODY_LENGTH = 500


class YouTubeError(Exception):
    """Base class for failures reported by the YouTube client."""

    title = "YouTube error"
    emoji = "❓"

    def to_admin_message(self) -> str:
        """Format error message for admin notification."""
        lines = [
            f"{self.emoji} <b>Error: {self.title}</b>",
            f"\n{html.escape(str(self), quote=False)}",
        ]

        solution = self._get_solution()
        if solution:
            lines.append(f"\n💡 <b>What to do:</b> {solution}")

        return "\n".join(lines)

    def _get_solution(self) -> str:
        return ""


class UnknownChannelError(YouTubeError):
    title = "Unknown channel"
    emoji = "📺"

    def __init__(self, channel_id: str):
        super().__init__(f"YouTube channel '{channel_id}' does not exist.")
        self.channel_id = channel_id

    def _get_solution(self) -> str:
        return "Check the channel id. It starts with UC and is shown on the channel's about page."


class UnknownVideoError(YouTubeError):
    title = "Unknown video"
    emoji = "🎬"

    def __init__(self, video_id: str):
        super().__init__(f"YouTube video '{video_id}' does not exist.")
        self.video_id = video_id

    def _get_solution(self) -> str:
        return "The video may be private or deleted. Check the link and try again."


class ProviderError(YouTubeError):
    title = "YouTube API request failed"
    emoji = "🔑"

    def __init__(self, status_code: Optional[int], body: str):
        snippet = body if len(body) <= MAX_BODY_LENGTH else body[:MAX_BODY_LENGTH] + "..."
        if status_code is None:
            message = f"YouTube API request failed: {snippet}"
        else:
            message = f"YouTube API responded with HTTP {status_code}: {snippet}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def _get_solution(self) -> str:
        if self.status_code == 403:
            return "The daily API quota may be exhausted or the key is invalid. Quota resets at midnight Pacific time."
        if self.status_code is None:
            return "The API could not be reached. Check the network and try again."
        return "Check the logs for the full response."
