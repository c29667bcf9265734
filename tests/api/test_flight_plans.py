"""Tests for flight plan routes against the fake portal."""

from __future__ import annotations

import pytest

from tests.api.conftest import PLAN, soap

FPL_LIST = soap(
    "<ns1:IsError>0</ns1:IsError><ns1:FPLsCount>1</ns1:FPLsCount>"
    "<ns1:TotalPages>1</ns1:TotalPages><ns1:CurrentPage>0</ns1:CurrentPage>"
    "<ns1:FPLsArray><ns1:FlId>1001</ns1:FlId><ns1:ARCID>OKABC</ns1:ARCID>"
    "<ns1:FlStatusCode>48</ns1:FlStatusCode><ns1:FlCanDo>12</ns1:FlCanDo>"
    "<ns1:TotalEET>75</ns1:TotalEET></ns1:FPLsArray>"
)


class TestListFlightPlans:
    async def test_current(self, client, portal, auth_headers):
        portal.answer("GetFPLListRequest", FPL_LIST)
        response = await client.get("/api/flight-plans", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["fpls_count"] == 1
        plan = body["flight_plans"][0]
        assert plan["fl_id"] == 1001
        assert plan["allowed_actions"] == ["delay", "cancel", "change", "depart", "arrive"]
        assert plan["status_category"] == "active"
        sent = portal.soap_requests["GetFPLListRequest"]
        assert "<mob:UserSession>user-session</mob:UserSession>" in sent

    async def test_archive_with_filters(self, client, portal, auth_headers):
        portal.answer("GetFPLArchiveRequest", FPL_LIST)
        response = await client.get(
            "/api/flight-plans",
            params={"type": "archive", "arcid": "OKABC", "page": 2, "limit": 10, "order_type": "ASC"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        sent = portal.soap_requests["GetFPLArchiveRequest"]
        assert "<mob:ARCID>OKABC</mob:ARCID>" in sent
        assert "<mob:PageNumber>2</mob:PageNumber>" in sent
        assert "<mob:PageItems>10</mob:PageItems>" in sent
        assert "<mob:OrderType>ASC</mob:OrderType>" in sent

    async def test_invalid_limit(self, client, auth_headers):
        response = await client.get("/api/flight-plans", params={"limit": 500}, headers=auth_headers)
        assert response.status_code == 422

    async def test_portal_error(self, client, portal, auth_headers):
        portal.answer("GetFPLListRequest", soap("<ns1:IsError>1</ns1:IsError>"))
        response = await client.get("/api/flight-plans", headers=auth_headers)
        assert response.status_code == 502

    async def test_portal_unavailable(self, client, portal, auth_headers):
        portal.answer("GetFPLListRequest", "maintenance", status_code=503)
        response = await client.get("/api/flight-plans", headers=auth_headers)
        assert response.status_code == 502
        assert response.json() == {"detail": "Homebriefing portal unavailable"}


class TestMessages:
    async def test_list(self, client, portal, auth_headers):
        portal.answer(
            "GetFlMsgListRequest",
            soap(
                "<ns1:IsError>0</ns1:IsError><ns1:MsgCount>1</ns1:MsgCount>"
                "<ns1:MsgArray><ns1:FlMsgId>9</ns1:FlMsgId><ns1:MsgType>FPL</ns1:MsgType>"
                "<ns1:MsgTxt>(FPL-OKABC-VG)</ns1:MsgTxt></ns1:MsgArray>"
            ),
        )
        response = await client.get("/api/flight-plans/1001/messages", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["messages"][0]["msg_type"] == "FPL"
        assert "<mob:FlId>1001</mob:FlId>" in portal.soap_requests["GetFlMsgListRequest"]


class TestValidateAndSend:
    async def test_validate_ok(self, client, portal, auth_headers):
        portal.answer("CheckFplValidityRequest", soap("<ns1:FplIsOk>1</ns1:FplIsOk>"))
        response = await client.post("/api/flight-plans/validate", json=PLAN, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["fpl_is_ok"] is True

    async def test_validate_errors_are_returned(self, client, portal, auth_headers):
        portal.answer(
            "CheckFplValidityRequest",
            soap(
                "<ns1:FplIsOk>0</ns1:FplIsOk>"
                "<ns1:FplErrors>F16 Unknown aerodrome</ns1:FplErrors>"
            ),
        )
        response = await client.post("/api/flight-plans/validate", json=PLAN, headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["fpl_is_ok"] is False
        assert body["field_errors"] == [{"field": "F16", "message": "Unknown aerodrome"}]

    async def test_validate_rejects_bad_form(self, client, auth_headers):
        response = await client.post(
            "/api/flight-plans/validate", json={**PLAN, "fl_rules": "Q"}, headers=auth_headers
        )
        assert response.status_code == 422

    async def test_send(self, client, portal, auth_headers):
        portal.answer("SendFplToCaroRequest", soap("<ns1:FplIsSent>1</ns1:FplIsSent>"))
        response = await client.post("/api/flight-plans/send", json=PLAN, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["fpl_is_sent"] is True
        assert "<ARCID>OKABC</ARCID>" in portal.soap_requests["SendFplToCaroRequest"]

    async def test_send_rejected(self, client, portal, auth_headers):
        portal.answer(
            "SendFplToCaroRequest",
            soap("<ns1:IsError>1</ns1:IsError><ns1:ErrMsg>Duplicate flight plan</ns1:ErrMsg>"),
        )
        response = await client.post("/api/flight-plans/send", json=PLAN, headers=auth_headers)
        assert response.status_code == 502
        body = response.json()
        assert body["detail"] == "Duplicate flight plan"
        assert body["error_messages"] == ["Duplicate flight plan"]


class TestDelayAndCancel:
    async def test_delay(self, client, portal, auth_headers):
        portal.answer("SendDLARequest", soap("<ns1:MsgSent>1</ns1:MsgSent>"))
        response = await client.post(
            "/api/flight-plans/1001/delay", json={"new_eobt": "0945"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "<mob:EobtVal>0945</mob:EobtVal>" in portal.soap_requests["SendDLARequest"]

    @pytest.mark.parametrize("new_eobt", ["945", "2460", "2500", "ab12"])
    async def test_delay_rejects_bad_time(self, client, auth_headers, new_eobt):
        response = await client.post(
            "/api/flight-plans/1001/delay", json={"new_eobt": new_eobt}, headers=auth_headers
        )
        assert response.status_code == 422

    async def test_cancel(self, client, portal, auth_headers):
        portal.answer("SendCNLRequest", soap("<ns1:MsgSent>1</ns1:MsgSent>"))
        response = await client.post("/api/flight-plans/1001/cancel", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["msg_sent"] is True

    async def test_cancel_not_sent(self, client, portal, auth_headers):
        portal.answer("SendCNLRequest", soap("<ns1:MsgSent>0</ns1:MsgSent>"))
        response = await client.post("/api/flight-plans/1001/cancel", headers=auth_headers)
        assert response.status_code == 502
        assert response.json()["detail"] == "Message was not sent"
