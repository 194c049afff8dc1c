from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import RedirectResponse

from catalog.services.outcome import FlowOutcome


async def get_raw_fields(request: Request) -> dict[str, Any]:
    """读取提交的原始字段：支持 JSON 与表单编码，同名多值字段返回列表"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="请求体不是合法的 JSON"
            )
        if not isinstance(body, dict):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="请求体必须是 JSON 对象"
            )
        return body

    form = await request.form()
    raw: dict[str, Any] = {}
    for key in form.keys():
        values = [v for v in form.getlist(key) if isinstance(v, str)]
        if values:
            raw[key] = values if len(values) > 1 else values[0]
    return raw


def respond(outcome: FlowOutcome):
    """成功写入 / 删除后 303 重定向，否则原样返回视图（HTTP 200）"""
    if outcome.redirect_url is not None:
        return RedirectResponse(outcome.redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    return outcome.view
