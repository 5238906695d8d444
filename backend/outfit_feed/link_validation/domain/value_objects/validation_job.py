from dataclasses import dataclass

VALIDATE_LINK_JOB = "validate_link"


@dataclass(frozen=True)
class ValidationJob:
    link_id: str
    url: str

    @classmethod
    def from_payload(cls, payload: dict) -> "ValidationJob":
        link_id = payload.get("linkId") or payload.get("link_id")
        url = payload.get("url")
        if not link_id or url is None:
            raise ValueError(f"无效的校验任务载荷: {payload}")
        return cls(link_id=str(link_id), url=str(url))

    def to_payload(self) -> dict:
        return {"linkId": self.link_id, "url": self.url}
