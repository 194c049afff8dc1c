from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class FlowOutcome:
    """表单提交 / 删除流程的结果：要么重定向，要么回显视图"""

    redirect_url: str | None = None
    view: BaseModel | None = None

    @classmethod
    def redirect(cls, url: str) -> "FlowOutcome":
        return cls(redirect_url=url)

    @classmethod
    def render(cls, view: BaseModel) -> "FlowOutcome":
        return cls(view=view)
