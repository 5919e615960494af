import pytest
import requests
import responses

from groupfun import shadiao


def test_fetch_text_shadiao_kind_reads_data_text():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, shadiao.CHP_URL, json={"data": {"text": "乖"}})
        assert shadiao.fetch_text("哄我") == "乖"
        request = rsps.calls[0].request
    assert request.headers["Referer"] == shadiao.SD_REFERER
    assert request.headers["User-Agent"] == shadiao.UA


def test_fetch_text_lovelive_kind_reads_return_obj():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET, shadiao.GANHAI_URL, json={"returnObj": {"content": "渣"}}
        )
        assert shadiao.fetch_text("渣我") == "渣"
        assert rsps.calls[0].request.headers["Referer"] == shadiao.LOVELIVE_REFERER


def test_fetch_text_duanzi_posts_and_replaces_breaks():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, shadiao.YDUANZI_URL, json={"duanzi": "一<br>二"})
        assert shadiao.fetch_text(shadiao.DUANZI_KIND) == "一\n二"
        assert rsps.calls[0].request.method == "POST"


def test_fetch_text_missing_field_gives_empty():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, shadiao.DU_URL, json={"other": 1})
        assert shadiao.fetch_text("来碗毒鸡汤") == ""


def test_fetch_text_unknown_kind():
    with pytest.raises(ValueError):
        shadiao.fetch_text("没有这个")


def test_fetch_text_http_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, shadiao.PYQ_URL, status=500)
        with pytest.raises(requests.HTTPError):
            shadiao.fetch_text("发个朋友圈")


def test_parse_duanzi():
    assert shadiao.parse_duanzi(b'{"duanzi": "a<br>b<br>c"}') == "a\nb\nc"
    assert shadiao.parse_duanzi("not json") == ""


def test_ergofabulous_insult():
    html = (
        '<html><body><main role="main"><p class="larger">Thou art a fool</p>'
        "</main></body></html>"
    )
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, shadiao.ERGOFABULOUS_URL, body=html)
        assert shadiao.ergofabulous_insult() == "Thou art a fool"


def test_ergofabulous_insult_missing():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET, shadiao.ERGOFABULOUS_URL, body="<html><body></body></html>"
        )
        with pytest.raises(LookupError):
            shadiao.ergofabulous_insult()


def test_hot_comment_returns_body_text():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.GET, shadiao.WANGYIYUN_URL, body="热评内容".encode("utf-8")
        )
        assert shadiao.hot_comment() == "热评内容"
        assert rsps.calls[0].request.headers["Referer"] == shadiao.WANGYIYUN_REFERER