"""BookContext driven against the in-process app."""

import pytest

from bookkeep.client import BookContext, BookkeepAPI, PageCountError
from bookkeep.client.api import AuthenticationRequired, ResourceError


@pytest.fixture
def api(client):
    return BookkeepAPI(http=client)


@pytest.fixture
def context(api):
    api.register("alice", "a@x.com", "pw1")
    ctx = BookContext(api)
    assert ctx.login("a@x.com", "pw1")
    return ctx


class TestBookkeepAPI:
    def test_login_keeps_token(self, api):
        api.register("alice", "a@x.com", "pw1")
        data = api.login("a@x.com", "pw1")

        assert api.token == data["token"]
        assert api.list_books() == []

    def test_unauthenticated_request(self, api):
        with pytest.raises(AuthenticationRequired) as exc_info:
            api.list_books()
        assert exc_info.value.status_code == 401

    def test_error_message_comes_from_body(self, api):
        with pytest.raises(ResourceError) as exc_info:
            api.login("nobody@x.com", "pw")
        assert exc_info.value.message == "Invalid credentials"
        assert exc_info.value.status_code == 400


class TestSession:
    def test_login_loads_books(self, context):
        assert context.is_authenticated
        assert not context.needs_login
        assert context.user["username"] == "alice"
        assert context.books == []

    def test_failed_login(self, api):
        ctx = BookContext(api)

        assert ctx.login("nobody@x.com", "pw") is False
        assert ctx.last_error == "Invalid credentials"
        assert not ctx.is_authenticated

    def test_logout_clears_state(self, context, dune):
        context.add_book(dune)

        context.logout()

        assert context.token is None
        assert context.books == []
        assert context.needs_login

    def test_set_token_refetches(self, context, api, dune):
        context.add_book(dune)
        token = context.token
        other = BookContext(BookkeepAPI(http=api.http))

        other.set_token(token)

        assert [b["title"] for b in other.books] == ["Dune"]

    def test_rejected_token_means_login_again(self, context):
        context.api.token = "garbage"

        context.refresh()

        assert context.needs_login
        assert context.token is None
        assert context.books == []
        assert context.last_error


class TestCollection:
    def test_add_book_goes_first(self, context, dune):
        context.add_book(dune)
        added = context.add_book({**dune, "title": "Emma", "genre": "Romance"})

        assert added["title"] == "Emma"
        assert [b["title"] for b in context.books] == ["Emma", "Dune"]

    def test_add_book_rejects_page_overflow(self, context, dune):
        with pytest.raises(PageCountError):
            context.add_book({**dune, "currentPage": 500})
        assert context.books == []

    def test_add_book_server_rejection(self, context, dune):
        result = context.add_book({**dune, "genre": "Cookbook"})

        assert result is None
        assert "genre" in context.last_error
        assert context.books == []

    def test_update_is_applied_optimistically(self, context, dune):
        book = context.add_book(dune)
        seen = []
        context.subscribe(lambda ctx: seen.append(ctx.get_book(book["id"])["currentPage"]))

        assert context.update_book(book["id"], {"status": "reading", "currentPage": 40})

        assert seen[0] == 40
        context.refresh()
        assert context.get_book(book["id"])["currentPage"] == 40

    def test_finishing_stamps_date(self, context, dune):
        book = context.add_book(dune)

        context.update_book(book["id"], {"status": "finished"})

        assert context.get_book(book["id"])["dateFinished"]
        context.refresh()
        assert context.get_book(book["id"])["dateFinished"]

    def test_update_page_overflow(self, context, dune):
        book = context.add_book(dune)

        with pytest.raises(PageCountError):
            context.update_book(book["id"], {"currentPage": 413})
        assert context.get_book(book["id"])["currentPage"] == 0

    def test_failed_update_refetches(self, context, dune, client, bearer):
        book = context.add_book(dune)
        client.delete(f"/api/books/{book['id']}", headers=bearer(context.token))

        assert context.update_book(book["id"], {"rating": 5}) is False

        assert context.books == []
        assert context.last_error == "Book not found"

    def test_delete_book(self, context, dune):
        book = context.add_book(dune)

        assert context.delete_book(book["id"])
        assert context.books == []

    def test_delete_missing_book(self, context):
        assert context.delete_book("missing") is False
        assert context.last_error == "Book not found"


class TestObservers:
    def test_subscribe_and_unsubscribe(self, context, dune):
        calls = []
        unsubscribe = context.subscribe(calls.append)

        context.add_book(dune)
        assert calls == [context]

        unsubscribe()
        context.add_book(dune)
        assert len(calls) == 1

    def test_yearly_goal(self, context):
        calls = []
        context.subscribe(calls.append)

        assert context.yearly_goal == 24
        context.yearly_goal = 12
        assert context.yearly_goal == 12
        assert len(calls) == 1

        with pytest.raises(ValueError):
            context.yearly_goal = 0
