from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, SimpleTestCase

from apps.audit.context import client_ip, resolve_actor, resolve_origin
from apps.audit.contracts import ActorContext, AuditContext, RequestContext


class ResolveActorTests(SimpleTestCase):
    def test_no_principal_is_system(self):
        self.assertEqual(resolve_actor(None), (None, "system"))

    def test_unauthenticated_is_system(self):
        actor = ActorContext(username="ghost", is_authenticated=False, is_anonymous=False)
        self.assertEqual(resolve_actor(actor), (None, "system"))

    def test_anonymous_is_system(self):
        actor = ActorContext.from_user(AnonymousUser())
        self.assertEqual(resolve_actor(actor), (None, "system"))

    def test_authenticated_user_name_without_id(self):
        actor = ActorContext(username="alice", is_authenticated=True, is_anonymous=False)
        self.assertEqual(resolve_actor(actor), (None, "alice"))


class ResolveOriginTests(SimpleTestCase):
    def test_first_forwarded_for_entry_wins(self):
        rc = RequestContext(forwarded_for="203.0.113.5, 10.0.0.1", remote_addr="10.0.0.9")
        self.assertEqual(client_ip(rc), "203.0.113.5")

    def test_falls_back_to_remote_addr(self):
        rc = RequestContext(remote_addr="198.51.100.7")
        self.assertEqual(client_ip(rc), "198.51.100.7")

    def test_oversized_forwarded_for_falls_back_to_remote_addr(self):
        rc = RequestContext(forwarded_for="x" * 300 + ", 10.0.0.1", remote_addr="198.51.100.7")
        address, _ = resolve_origin(rc)
        self.assertEqual(address, "198.51.100.7")

    def test_malformed_addresses_are_dropped(self):
        rc = RequestContext(forwarded_for="not-an-ip", remote_addr="also bad")
        self.assertEqual(resolve_origin(rc), (None, None))

    def test_ipv6_forwarded_for_is_kept(self):
        rc = RequestContext(forwarded_for="2001:db8::1, 10.0.0.1")
        self.assertEqual(client_ip(rc), "2001:db8::1")

    def test_no_request_context(self):
        self.assertEqual(resolve_origin(None), (None, None))

    def test_user_agent_is_truncated(self):
        rc = RequestContext(remote_addr="127.0.0.1", user_agent="x" * 600)
        address, agent = resolve_origin(rc)
        self.assertEqual(address, "127.0.0.1")
        self.assertEqual(len(agent), 500)


class AuditContextFromRequestTests(SimpleTestCase):
    def test_reads_headers_and_user(self):
        request = RequestFactory().get(
            "/",
            HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1",
            HTTP_USER_AGENT="tests/1.0",
            REMOTE_ADDR="10.0.0.9",
        )
        request.user = AnonymousUser()

        context = AuditContext.from_request(request)

        self.assertEqual(context.request.forwarded_for, "203.0.113.5, 10.0.0.1")
        self.assertEqual(context.request.remote_addr, "10.0.0.9")
        self.assertEqual(context.request.user_agent, "tests/1.0")
        self.assertTrue(context.actor.is_anonymous)
        self.assertEqual(resolve_origin(context.request), ("203.0.113.5", "tests/1.0"))

    def test_request_without_user_attribute(self):
        request = RequestFactory().get("/", REMOTE_ADDR="10.0.0.9")
        context = AuditContext.from_request(request)
        self.assertEqual(resolve_actor(context.actor), (None, "system"))
