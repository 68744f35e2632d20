#!/usr/bin/env python3
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
"""
Unit tests for PocketClient: request dispatch, preconditions and decoding.
"""

import itertools
import unittest
from unittest.mock import MagicMock

from credentials import Credentials
from errors import (
    MissingAccessTokenError,
    ResponseValidationError,
    TransportError,
)
from models import ItemAction, LiveItem, RetrieveParameters, TagAction, TombstoneItem
from pocket_client import REQUEST_HEADERS, PocketClient
from sample_responses import add_response, retrieve_response


class ClientTestCase(unittest.TestCase):
    def setUp(self):
        self.transport = MagicMock()
        self.credentials = Credentials(
            consumer_key="1234-abcd1234abcd1234abcd1234",
            redirect_uri="https://app.example/cb",
            access_token="5678defg-5678-defg-5678-defg56",
        )
        self.client = PocketClient(self.credentials, transport=self.transport)

    def sent(self):
        url, body, headers = self.transport.post.call_args[0]
        return url, body, headers


class TestDispatch(ClientTestCase):
    def test_body_merges_credentials_and_payload(self):
        self.transport.post.return_value = retrieve_response()

        self.client.retrieve({"count": 10})

        url, body, headers = self.sent()
        self.assertEqual(url, "https://getpocket.com/v3/get")
        self.assertEqual(
            body,
            {
                "consumer_key": "1234-abcd1234abcd1234abcd1234",
                "access_token": "5678defg-5678-defg-5678-defg56",
                "count": 10,
            },
        )
        self.assertEqual(headers, REQUEST_HEADERS)
        self.assertEqual(headers["X-Accept"], "application/json")

    def test_custom_base_url(self):
        client = PocketClient(
            self.credentials, transport=self.transport, base_url="http://localhost:9000/"
        )
        self.transport.post.return_value = retrieve_response()
        client.retrieve()
        self.assertEqual(self.sent()[0], "http://localhost:9000/v3/get")

    def test_transport_error_propagates_unchanged(self):
        error = TransportError("API request failed with status 503", status=503)
        self.transport.post.side_effect = error

        with self.assertRaises(TransportError) as ctx:
            self.client.retrieve()

        self.assertIs(ctx.exception, error)

    def test_schema_mismatch_is_a_validation_error(self):
        self.transport.post.return_value = {"status": 1}

        with self.assertRaises(ResponseValidationError) as ctx:
            self.client.retrieve()

        self.assertNotIsInstance(ctx.exception, TransportError)
        self.assertEqual(ctx.exception.path, "list")


class TestPreconditions(ClientTestCase):
    def setUp(self):
        super().setUp()
        self.client = PocketClient(
            self.credentials.with_access_token(None), transport=self.transport
        )

    def assert_precondition_failure(self, call):
        with self.assertRaises(MissingAccessTokenError) as ctx:
            call()
        self.assertNotIsInstance(ctx.exception, (TransportError, ResponseValidationError))
        self.transport.post.assert_not_called()
        return ctx.exception

    def test_add_without_access_token(self):
        urls = ["https://example.com/a", "not a url"]
        titles = [None, "A title"]
        tags = [None, "a,b", ["a", "b"]]
        for url, title, tag in itertools.product(urls, titles, tags):
            with self.subTest(url=url, title=title, tags=tag):
                error = self.assert_precondition_failure(
                    lambda: self.client.add(url, title=title, tags=tag)
                )
                self.assertEqual(error.operation, "add")

    def test_modify_without_access_token(self):
        batches = [
            [],
            [ItemAction(action="archive", item_id="1")],
            [
                TagAction(action="tags_add", item_id="1", tags="x"),
                ItemAction(action="delete", item_id="2"),
            ],
            [{"action": "favorite", "item_id": "3"}],
        ]
        for batch in batches:
            with self.subTest(batch=batch):
                self.assert_precondition_failure(lambda: self.client.modify(batch))

    def test_retrieve_without_access_token(self):
        filters = [
            None,
            {},
            {"state": "unread", "count": 5},
            RetrieveParameters(sort="newest", detail_type="complete"),
        ]
        for value in filters:
            with self.subTest(filters=value):
                self.assert_precondition_failure(lambda: self.client.retrieve(value))
                self.assert_precondition_failure(lambda: self.client.retrieve_page(value))

    def test_blank_access_token_counts_as_missing(self):
        client = PocketClient(self.credentials.with_access_token(""), transport=self.transport)
        self.assertFalse(client.has_access_token)
        with self.assertRaises(MissingAccessTokenError):
            client.retrieve()

    def test_auth_calls_do_not_need_access_token(self):
        self.transport.post.return_value = {"code": "abc123"}

        token = self.client.request_token()

        self.assertEqual(token.code, "abc123")
        _, body, _ = self.sent()
        self.assertNotIn("access_token", body)


class TestAdd(ClientTestCase):
    def test_add(self):
        self.transport.post.return_value = add_response()

        item = self.client.add("http://www.grantland.com/ryder-cup", tags=["golf", "sports"])

        self.assertEqual(item.item_id, "229279689")
        url, body, _ = self.sent()
        self.assertEqual(url, "https://getpocket.com/v3/add")
        self.assertEqual(body["url"], "http://www.grantland.com/ryder-cup")
        self.assertEqual(body["tags"], "golf,sports")
        self.assertNotIn("title", body)

    def test_add_with_title(self):
        self.transport.post.return_value = add_response()
        self.client.add("http://example.com/image.png", title="Diagram", tags="a,b")
        _, body, _ = self.sent()
        self.assertEqual(body["title"], "Diagram")
        self.assertEqual(body["tags"], "a,b")

    def test_add_with_blank_tags_rejected_before_sending(self):
        with self.assertRaises(ValueError):
            self.client.add("http://example.com", tags="")
        self.transport.post.assert_not_called()

    def test_add_invalid_response(self):
        self.transport.post.return_value = add_response(has_image="3")
        with self.assertRaises(ResponseValidationError) as ctx:
            self.client.add("http://example.com")
        self.assertEqual(ctx.exception.path, "item.has_image")


class TestModify(ClientTestCase):
    def test_modify_sends_actions_in_order(self):
        actions = [
            ItemAction(action="archive", item_id="1"),
            TagAction(action="tags_add", item_id="2", tags=["news", "tech"]),
            {"action": "favorite", "item_id": "3", "time": "1349454582"},
        ]
        self.transport.post.return_value = {"status": 1, "action_results": [True, False, True]}

        result = self.client.modify(actions)

        url, body, _ = self.sent()
        self.assertEqual(url, "https://getpocket.com/v3/send")
        self.assertEqual(
            body["actions"],
            [
                {"action": "archive", "item_id": "1"},
                {"action": "tags_add", "item_id": "2", "tags": "news,tech"},
                {"action": "favorite", "item_id": "3", "time": 1349454582},
            ],
        )
        self.assertEqual([f.index for f in result.failures], [1])
        self.assertEqual(result.failures[0].action.item_id, "2")

    def test_modify_result_length_mismatch(self):
        self.transport.post.return_value = {"status": 1, "action_results": [True]}
        with self.assertRaises(ResponseValidationError):
            self.client.modify(
                [
                    ItemAction(action="archive", item_id="1"),
                    ItemAction(action="archive", item_id="2"),
                ]
            )

    def test_invalid_action_is_rejected_before_sending(self):
        with self.assertRaises(ValueError):
            self.client.modify([{"action": "tags_add", "item_id": "1"}])
        self.transport.post.assert_not_called()


class TestRetrieve(ClientTestCase):
    def test_retrieve_returns_discriminated_items(self):
        self.transport.post.return_value = retrieve_response()

        items = self.client.retrieve()

        self.assertIsInstance(items["229279689"], LiveItem)
        self.assertIsInstance(items["229279690"], TombstoneItem)

    def test_filters_use_wire_names(self):
        self.transport.post.return_value = retrieve_response()

        self.client.retrieve(
            RetrieveParameters(
                state="archive",
                favorite=1,
                content_type="article",
                detail_type="complete",
                sort="oldest",
                since=1349454582,
                offset=30,
                total=1,
            )
        )

        _, body, _ = self.sent()
        self.assertEqual(body["contentType"], "article")
        self.assertEqual(body["detailType"], "complete")
        self.assertEqual(body["total"], 1)
        self.assertNotIn("content_type", body)
        self.assertNotIn("search", body)

    def test_filters_from_mapping(self):
        self.transport.post.return_value = retrieve_response()
        self.client.retrieve({"contentType": "video", "search": "golf", "tag": "_untagged_"})
        _, body, _ = self.sent()
        self.assertEqual(body["contentType"], "video")
        self.assertEqual(body["search"], "golf")
        self.assertEqual(body["tag"], "_untagged_")

    def test_unknown_filter_rejected_before_sending(self):
        with self.assertRaises(ValueError):
            self.client.retrieve({"sort": "random"})
        with self.assertRaises(ValueError):
            self.client.retrieve({"colour": "blue"})
        self.transport.post.assert_not_called()

    def test_retrieve_page_keeps_metadata(self):
        raw = retrieve_response()
        raw["total"] = "2"
        self.transport.post.return_value = raw

        page = self.client.retrieve_page({"total": 1})

        self.assertEqual(page.total, 2)
        self.assertEqual(page.since, 1349454650)


class RecordingTransport:
    """Minimal transport: any object with a matching post method will do."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def post(self, url, body, headers):
        self.calls.append((url, body, headers))
        return self.reply


class TestCustomTransport(unittest.TestCase):
    def test_plain_object_transport(self):
        transport = RecordingTransport({"code": "abc123"})
        client = PocketClient(Credentials("key", "https://app.example/cb"), transport=transport)

        token = client.request_token()

        self.assertEqual(token.code, "abc123")
        self.assertEqual(transport.calls[0][0], "https://getpocket.com/v3/oauth/request")
        self.assertEqual(transport.calls[0][2], REQUEST_HEADERS)


class TestClientCredentials(ClientTestCase):
    def test_with_access_token_returns_new_client(self):
        anonymous = PocketClient(self.credentials.with_access_token(None), transport=self.transport)

        authorized = anonymous.with_access_token("new-token")

        self.assertIsNot(authorized, anonymous)
        self.assertFalse(anonymous.has_access_token)
        self.assertTrue(authorized.has_access_token)
        self.assertEqual(authorized.credentials.access_token, "new-token")
        self.assertIs(authorized.transport, self.transport)


if __name__ == "__main__":
    unittest.main()
