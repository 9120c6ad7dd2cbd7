"""Tests for the Jinja2 web pages and form posts."""

import io

from PIL import Image

from ratemyrez.core.errors import SubscriptionError
from ratemyrez.services.store import REVIEWS
from ratemyrez.services.subscriptions import property_questions_query, property_reviews_query


def post_review(client, property_id: str = "icon-330-phillip", **fields):
    data = {"rating": "4", "rent": "1200", "distance": "10", "comment": "ok"}
    data.update(fields)
    return client.post(f"/properties/{property_id}/reviews", data=data, follow_redirects=False)


def only_review(store, property_id: str = "icon-330-phillip"):
    reviews = store.run_query(property_reviews_query(property_id))
    assert len(reviews) == 1
    return reviews[0]


# =============================================================================
# Browsing
# =============================================================================


class TestBrowsing:
    """Tests for pages anyone can see."""

    def test_home_page(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Rate My" in response.text
        assert "No reviews yet" in response.text

    def test_home_feed_lists_reviews(self, student_client):
        post_review(student_client, comment="Great gym downstairs")
        response = student_client.get("/")
        assert "Great gym downstairs" in response.text

    def test_on_campus_list(self, client):
        response = client.get("/on-campus")
        assert response.status_code == 200
        assert "Village 1 (V1)" in response.text
        assert "ICON (330 Phillip St)" not in response.text

    def test_off_campus_list_has_search(self, client):
        response = client.get("/off-campus?faculty=Math")
        assert response.status_code == 200
        assert "ICON (330 Phillip St)" in response.text
        assert 'name="search_term"' in response.text

    def test_search_redirects_to_custom_property(self, client):
        response = client.post(
            "/off-campus/search", data={"search_term": "203 Lester St"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/properties/203-lester-st?name=203+Lester+St"

        page = client.get(response.headers["location"])
        assert page.status_code == 200
        assert "203 Lester St" in page.text
        assert "Custom Address" in page.text

    def test_blank_search(self, client):
        response = client.post("/off-campus/search", data={"search_term": " "}, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/off-campus"

    def test_property_page(self, client):
        response = client.get("/properties/v1")
        assert response.status_code == 200
        assert "Village 1 (V1)" in response.text
        assert "No reviews yet. Be the first!" in response.text
        assert "google.com/maps" in response.text

    def test_property_page_unknown_sort(self, client):
        response = client.get("/properties/v1?sort=BOGUS")
        assert response.status_code == 200

    def test_static_pages(self, client):
        assert client.get("/about").status_code == 200
        assert client.get("/contact").status_code == 200

    def test_property_page_survives_failed_list(self, client, store, monkeypatch):
        def failing_query(query):
            raise SubscriptionError()

        monkeypatch.setattr(store, "run_query", failing_query)
        response = client.get("/properties/v1")
        assert response.status_code == 200
        assert "Village 1 (V1)" in response.text
        assert SubscriptionError.message in response.text


# =============================================================================
# Reviews
# =============================================================================


class TestReviews:
    """Tests for writing, editing and voting on reviews."""

    def test_guest_redirected_to_login(self, client):
        response = client.get("/properties/v1/reviews/new", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login?next=/properties/v1"

    def test_guest_post_writes_nothing(self, client, store):
        response = post_review(client)
        assert response.status_code == 303
        assert response.headers["location"].startswith("/login")
        assert store.run_query(property_reviews_query("icon-330-phillip")) == []

    def test_new_review_form(self, student_client):
        response = student_client.get("/properties/v1/reviews/new")
        assert response.status_code == 200
        assert "Write a review" in response.text

    def test_post_review(self, student_client, store):
        response = post_review(student_client, tags=["ac", "gym", "hot-tub"])
        assert response.status_code == 303
        assert response.headers["location"] == "/properties/icon-330-phillip"

        review = only_review(store)
        assert review.rating == 4
        assert review.rent == 1200
        assert review.tags == ["ac", "gym"]
        assert review.user_email == "bob@uwaterloo.ca"

        page = student_client.get("/properties/icon-330-phillip")
        assert "Review posted!" in page.text
        assert "$1200" in page.text
        assert "4.0" in page.text

    def test_flash_queued_behind_unread_flash(self, student_client):
        # The sign-up flash is still unread when the review is posted
        response = post_review(student_client)
        assert response.status_code == 303
        assert "set-cookie" in response.headers

        page = student_client.get("/")
        assert "Account created successfully!" in page.text
        assert "Review posted!" in page.text

    def test_missing_rating(self, student_client, store):
        response = post_review(student_client, rating="")
        assert response.status_code == 400
        assert "Please choose a star rating." in response.text
        assert store.run_query(property_reviews_query("icon-330-phillip")) == []

    def test_blank_numbers_are_unset(self, student_client, store):
        post_review(student_client, rent="", distance="")
        review = only_review(store)
        assert review.rent == 0
        assert review.distance == 0

    def test_photo_upload(self, student_client, store):
        buf = io.BytesIO()
        Image.new("RGB", (1200, 600)).save(buf, "PNG")
        response = student_client.post(
            "/properties/icon-330-phillip/reviews",
            data={"rating": "5"},
            files={"photo": ("room.png", buf.getvalue(), "image/png")},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert only_review(store).image.startswith("data:image/jpeg;base64,")

    def test_bad_photo(self, student_client, store):
        response = student_client.post(
            "/properties/icon-330-phillip/reviews",
            data={"rating": "5"},
            files={"photo": ("room.png", b"not a picture", "image/png")},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert store.run_query(property_reviews_query("icon-330-phillip")) == []

    def test_review_for_searched_address(self, student_client, store):
        response = post_review(student_client, "203-lester-st", name="203 Lester St")
        assert response.headers["location"] == "/properties/203-lester-st?name=203+Lester+St"
        review = only_review(store, "203-lester-st")
        assert review.property_name == "203 Lester St"
        assert review.category == "OFF"

    def test_edit_review(self, student_client, store):
        post_review(student_client)
        review_id = only_review(store).id

        form = student_client.get(f"/reviews/{review_id}/edit")
        assert form.status_code == 200
        assert "Edit your review" in form.text

        response = student_client.post(
            f"/reviews/{review_id}/edit",
            data={"rating": "5", "rent": "0", "comment": "Even better"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        review = store.get(REVIEWS, review_id)
        assert review.rating == 5
        assert review.rent == 0
        assert review.comment == "Even better"
        assert review.last_edited is not None

    def test_edit_keeps_photo_unless_removed(self, student_client, store):
        buf = io.BytesIO()
        Image.new("RGB", (50, 50)).save(buf, "PNG")
        student_client.post(
            "/properties/icon-330-phillip/reviews",
            data={"rating": "5"},
            files={"photo": ("room.png", buf.getvalue(), "image/png")},
        )
        review_id = only_review(store).id

        student_client.post(f"/reviews/{review_id}/edit", data={"rating": "4"})
        assert store.get(REVIEWS, review_id).image is not None

        student_client.post(
            f"/reviews/{review_id}/edit", data={"rating": "4", "remove_photo": "true"}
        )
        assert store.get(REVIEWS, review_id).image is None

    def test_edit_someone_elses_review(self, student_client, client, store):
        post_review(student_client)
        review_id = only_review(store).id
        client.get("/logout")
        client.post(
            "/signup", data={"email": "mallory@uwaterloo.ca", "password": "password123"}
        )

        response = client.post(
            f"/reviews/{review_id}/edit", data={"rating": "1"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert store.get(REVIEWS, review_id).rating == 4

        page = client.get(f"/reviews/{review_id}/edit", follow_redirects=False)
        assert page.status_code == 303

    def test_helpful_vote_once(self, student_client, store):
        post_review(student_client)
        review_id = only_review(store).id
        for _ in range(2):
            response = student_client.post(f"/reviews/{review_id}/helpful", follow_redirects=False)
            assert response.status_code == 303
        review = store.get(REVIEWS, review_id)
        assert review.helpful_count == 1
        assert len(review.voted_uids) == 1

    def test_guest_vote_redirects_to_login(self, student_client, client, store):
        post_review(student_client)
        review_id = only_review(store).id
        client.get("/logout")
        response = client.post(f"/reviews/{review_id}/helpful", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"].startswith("/login")
        assert store.get(REVIEWS, review_id).helpful_count == 0


# =============================================================================
# Community Q&A
# =============================================================================


class TestQuestions:
    """Tests for the Q&A tab."""

    def test_guest_can_ask(self, client, store):
        response = client.post(
            "/properties/v1/questions", data={"text": "Is there AC?"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/properties/v1?tab=qa"

        page = client.get("/properties/v1?tab=qa")
        assert "Is there AC?" in page.text

    def test_reply_expands_thread(self, client, store):
        client.post("/properties/v1/questions", data={"text": "Is there AC?"})
        question = store.run_query(property_questions_query("v1"))[0]

        response = client.post(
            f"/questions/{question.id}/replies",
            data={"text": "Only fans"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == f"/properties/v1?tab=qa&expand={question.id}"

        page = client.get(response.headers["location"])
        assert "Only fans" in page.text
        assert "Hide Replies" in page.text


# =============================================================================
# Authentication
# =============================================================================


class TestAuthPages:
    """Tests for sign-up, log-in, reset and log-out."""

    def test_login_page(self, client):
        response = client.get("/login?next=/properties/v1")
        assert response.status_code == 200
        assert 'value="/properties/v1"' in response.text

    def test_signup_rejects_other_domain(self, client):
        response = client.post(
            "/signup", data={"email": "bob@gmail.com", "password": "password123"}
        )
        assert response.status_code == 400
        assert "Access Denied: You must use a @uwaterloo.ca email." in response.text

    def test_signup_duplicate(self, student_client):
        student_client.get("/logout")
        response = student_client.post(
            "/signup", data={"email": "bob@uwaterloo.ca", "password": "password123"}
        )
        assert response.status_code == 400
        assert "This email is already registered." in response.text

    def test_login_wrong_password(self, student_client):
        student_client.get("/logout")
        response = student_client.post(
            "/login", data={"email": "bob@uwaterloo.ca", "password": "wrong-password"}
        )
        assert response.status_code == 400
        assert "Incorrect email or password." in response.text

    def test_login_follows_next(self, student_client):
        student_client.get("/logout")
        response = student_client.post(
            "/login",
            data={
                "email": "bob@uwaterloo.ca",
                "password": "password123",
                "next_url": "/properties/v1",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/properties/v1"

    def test_login_ignores_offsite_next(self, student_client):
        student_client.get("/logout")
        response = student_client.post(
            "/login",
            data={
                "email": "bob@uwaterloo.ca",
                "password": "password123",
                "next_url": "//evil.example.com",
            },
            follow_redirects=False,
        )
        assert response.headers["location"] == "/"

    def test_logged_in_user_skips_login_page(self, student_client):
        response = student_client.get("/login", follow_redirects=False)
        assert response.status_code == 303

    def test_logout_returns_to_guest(self, student_client):
        response = student_client.get("/logout", follow_redirects=False)
        assert response.status_code == 303
        page = student_client.get("/")
        assert "bob@uwaterloo.ca" not in page.text
        assert "Log in" in page.text

    def test_password_reset_flow(self, student_client, sent_emails):
        student_client.get("/logout")
        response = student_client.post("/reset-password", data={"email": "bob@uwaterloo.ca"})
        assert response.status_code == 200
        assert "Reset link sent! Check your inbox." in response.text

        _, token = sent_emails[0]
        assert student_client.get(f"/reset-password/{token}").status_code == 200
        response = student_client.post(
            f"/reset-password/{token}", data={"password": "brandnew1"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

        response = student_client.post(
            "/login",
            data={"email": "bob@uwaterloo.ca", "password": "brandnew1"},
            follow_redirects=False,
        )
        assert response.status_code == 303

    def test_password_reset_other_domain(self, client):
        response = client.post("/reset-password", data={"email": "bob@gmail.com"})
        assert response.status_code == 400
        assert "Access Denied" in response.text

    def test_password_reset_bad_token(self, client):
        response = client.post("/reset-password/nope", data={"password": "brandnew1"})
        assert response.status_code == 400
        assert "This reset link is invalid or has expired." in response.text
