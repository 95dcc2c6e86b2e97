import unittest
from unittest.mock import Mock

import httpx

from raiz.core.errors import NoLatestVersion, NotFound, ParseError, RegistryError, TransportError, VersionNotFound
from raiz.core.registry import RegistryClient, package_url

BASE = "https://registry.test"


def client_for(handler, **kwargs):
    return RegistryClient(base_url=BASE, transport=httpx.MockTransport(handler), **kwargs)


def document(name, latest="1.0.0", versions=("1.0.0",)):
    return {
        "name": name,
        "dist-tags": {"latest": latest} if latest else {},
        "versions": {v: {"version": v, "dependencies": {}} for v in versions},
    }


class TestPackageUrl(unittest.TestCase):

    def test_plain_name(self):
        self.assertEqual(package_url(BASE, "express"), "https://registry.test/express")

    def test_scoped_name_keeps_a_single_segment(self):
        self.assertEqual(package_url(BASE + "/", "@types/node"), "https://registry.test/@types%2Fnode")


class TestRegistryClient(unittest.TestCase):

    def test_fetch_latest(self):
        def handler(request):
            return httpx.Response(200, json=document("express", latest="4.18.2", versions=("4.17.1", "4.18.2")))

        with client_for(handler) as client:
            meta, version = client.fetch("express")

        self.assertEqual(meta.name, "express")
        self.assertEqual(version, "4.18.2")

    def test_fetch_explicit_version(self):
        def handler(request):
            return httpx.Response(200, json=document("lodash", latest="4.17.21", versions=("4.17.20", "4.17.21")))

        with client_for(handler) as client:
            _, version = client.fetch("lodash", "4.17.20")

        self.assertEqual(version, "4.17.20")

    def test_scoped_request_path(self):
        seen = []

        def handler(request):
            seen.append(request.url.raw_path)
            return httpx.Response(200, json=document("@types/node"))

        with client_for(handler) as client:
            meta, _ = client.fetch("@types/node")

        self.assertEqual(seen, [b"/@types%2Fnode"])
        self.assertEqual(meta.name, "@types/node")

    def test_not_found(self):
        with client_for(lambda request: httpx.Response(404, json={"error": "Not found"})) as client:
            with self.assertRaises(NotFound) as ctx:
                client.fetch("nope-nope")

        self.assertEqual(ctx.exception.package_name, "nope-nope")

    def test_other_status(self):
        with client_for(lambda request: httpx.Response(503, text="busy")) as client:
            with self.assertRaises(RegistryError) as ctx:
                client.fetch("express")

        self.assertEqual(ctx.exception.status_code, 503)
        self.assertIn("503", str(ctx.exception))

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with client_for(handler) as client:
            with self.assertRaises(TransportError) as ctx:
                client.fetch("express")

        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    def test_timeout_is_a_transport_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with client_for(handler) as client:
            with self.assertRaises(TransportError):
                client.fetch("express")

    def test_malformed_body(self):
        with client_for(lambda request: httpx.Response(200, text="<html>oops</html>")) as client:
            with self.assertRaises(ParseError):
                client.fetch("express")

    def test_body_must_be_an_object(self):
        with client_for(lambda request: httpx.Response(200, json=["express"])) as client:
            with self.assertRaises(ParseError):
                client.fetch("express")

    def test_no_latest_tag(self):
        with client_for(lambda request: httpx.Response(200, json=document("express", latest=None))) as client:
            with self.assertRaises(NoLatestVersion):
                client.fetch("express")

    def test_unknown_version(self):
        with client_for(lambda request: httpx.Response(200, json=document("express"))) as client:
            with self.assertRaises(VersionNotFound):
                client.fetch("express", "0.0.1")

    def test_every_fetch_hits_the_network(self):
        calls = []
        on_fetch = Mock()

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(200, json=document("ms"))

        with client_for(handler, on_fetch=on_fetch) as client:
            client.fetch("ms")
            client.fetch("ms")

        self.assertEqual(len(calls), 2)
        self.assertEqual(on_fetch.call_count, 2)
        on_fetch.assert_called_with("ms")
