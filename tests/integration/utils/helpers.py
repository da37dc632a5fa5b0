# tests/integration/utils/helpers.py
import json

import requests

from sheetcalc.models.api import EvaluateRequest

# Small cap so the limit check is cheap to exercise
TEST_MAX_MODIFIERS = 50


# ---------- HTTP helpers (show server error bodies) ----------
def _post(url: str, payload: dict, *, timeout=5) -> dict:
    r = requests.post(url, json=payload, timeout=timeout)
    if r.status_code >= 400:
        try:
            body = r.json()
        except ValueError:
            body = r.text
        raise requests.HTTPError(
            f"{r.status_code} {r.reason} for {url}\n"
            f"Payload:\n{json.dumps(payload, indent=2)}\n"
            f"Response:\n{body}",
            response=r,
        )
    return r.json()


def _get(url: str, *, timeout=5) -> dict:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()


def _payload(req: EvaluateRequest) -> dict:
    # Pydantic model_dump_json -> json string -> json.loads -> dict (wire field names)
    return json.loads(req.model_dump_json(by_alias=True, exclude_none=True))


def _evaluate(base_url: str, req: EvaluateRequest) -> dict:
    return _post(f"{base_url}/statistics/evaluate", _payload(req))


def _final(resp: dict, selector: str):
    return resp["statistics"][selector]["final_value"]
