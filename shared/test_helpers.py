"""
Test helper functions and factory methods for the Copilot Metrics Bridge.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from shared.errors import DispatchError


class SnapshotFactory:
    """Factory for Copilot metrics payloads shaped like the GitHub API."""

    @staticmethod
    def full_payload(date: str = "2023-03-01", scale: int = 1) -> Dict[str, Any]:
        """Snapshot with every feature block and breakdown populated."""
        return {
            "date": date,
            "total_active_users": 1000 * scale,
            "total_engaged_users": 800 * scale,
            "copilot_ide_code_completions": {
                "total_engaged_users": 600 * scale,
                "languages": [
                    {"name": "rust", "total_engaged_users": 300 * scale}
                ],
                "editors": [
                    {
                        "name": "vscode",
                        "total_engaged_users": 550 * scale,
                        "models": [
                            {
                                "name": "default",
                                "is_custom_model": False,
                                "custom_model_training_date": None,
                                "total_engaged_users": 540 * scale,
                                "languages": [
                                    {
                                        "name": "rust",
                                        "total_engaged_users": 290 * scale,
                                        "total_code_suggestions": 5000 * scale,
                                        "total_code_acceptances": 2500 * scale,
                                        "total_code_lines_suggested": 10000 * scale,
                                        "total_code_lines_accepted": 5000 * scale
                                    }
                                ]
                            }
                        ]
                    }
                ]
            },
            "copilot_ide_chat": {
                "total_engaged_users": 400 * scale,
                "editors": [
                    {
                        "name": "vscode",
                        "total_engaged_users": 375 * scale,
                        "models": [
                            {
                                "name": "default",
                                "is_custom_model": False,
                                "total_engaged_users": 370 * scale,
                                "total_chats": 900 * scale,
                                "total_chat_insertion_events": 120 * scale,
                                "total_chat_copy_events": 80 * scale
                            }
                        ]
                    }
                ]
            },
            "copilot_dotcom_chat": {
                "total_engaged_users": 300 * scale,
                "models": [
                    {
                        "name": "default",
                        "is_custom_model": False,
                        "total_engaged_users": 290 * scale,
                        "total_chats": 500 * scale
                    }
                ]
            },
            "copilot_dotcom_pull_requests": {
                "total_engaged_users": 200 * scale,
                "repositories": [
                    {
                        "name": "acme/api",
                        "total_engaged_users": 180 * scale,
                        "models": [
                            {
                                "name": "default",
                                "is_custom_model": False,
                                "total_engaged_users": 170 * scale,
                                "total_pr_summaries_created": 50 * scale
                            }
                        ]
                    }
                ]
            }
        }

    @staticmethod
    def minimal_payload(
        date: str = "2024-01-01",
        active: Optional[int] = None,
        engaged: Optional[int] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"date": date}
        if active is not None:
            payload["total_active_users"] = active
        if engaged is not None:
            payload["total_engaged_users"] = engaged
        return payload

    @staticmethod
    def ide_chat_payload(date: str, chats_per_editor: Sequence[Sequence[int]]) -> Dict[str, Any]:
        """IDE chat block with one editor per entry and one model per chat count."""
        editors = []
        for editor_index, chat_counts in enumerate(chats_per_editor):
            editors.append({
                "name": f"editor-{editor_index + 1}",
                "total_engaged_users": 10,
                "models": [
                    {
                        "name": f"model-{model_index + 1}",
                        "is_custom_model": model_index % 2 == 1,
                        "total_engaged_users": 5,
                        "total_chats": chats
                    }
                    for model_index, chats in enumerate(chat_counts)
                ]
            })
        return {
            "date": date,
            "total_active_users": 20,
            "total_engaged_users": 15,
            "copilot_ide_chat": {"total_engaged_users": 15, "editors": editors}
        }

    @staticmethod
    def as_json(payloads: List[Dict[str, Any]]) -> str:
        return json.dumps(payloads)


class RecordingTransport:
    """In-memory transport recording every chunk it receives.

    ``fail_on`` lists zero-based chunk indexes that raise ``DispatchError``.
    """

    def __init__(self, fail_on: Sequence[int] = ()):
        self.fail_on = set(fail_on)
        self.chunks: List[List[Any]] = []
        self.attempts = 0

    async def submit(self, chunk: Sequence[Any]) -> None:
        index = self.attempts
        self.attempts += 1
        if index in self.fail_on:
            raise DispatchError(message="HTTP error 500", status_code=500)
        self.chunks.append(list(chunk))

    @property
    def points(self) -> List[Any]:
        return [point for chunk in self.chunks for point in chunk]
