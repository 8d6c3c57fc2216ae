import pytest

from bot.errors import ConsistencyError
from core.models import Author, Like, UnsupportedMessage

POST = 10
USER = 20


@pytest.mark.django_db
class TestLikeToggle:
    def kinds(self, post_id=POST, user_id=USER):
        likes = Like.objects.filter(post_id=post_id, user_id=user_id)
        return list(likes.values_list('reaction_type', flat=True))

    def test_first_vote(self):
        assert Like.objects.toggle(POST, 1, USER)
        assert self.kinds() == [1]

    def test_same_kind_twice(self):
        before = Like.objects.tally(POST, 3)
        assert Like.objects.toggle(POST, 1, USER)
        assert not Like.objects.toggle(POST, 1, USER)
        assert self.kinds() == []
        assert Like.objects.tally(POST, 3) == before

    def test_odd_number_of_presses(self):
        for _ in range(5):
            Like.objects.toggle(POST, 2, USER)
        assert self.kinds() == [2]

    def test_switch_kind(self):
        Like.objects.toggle(POST, 0, USER)
        assert Like.objects.toggle(POST, 2, USER)
        assert self.kinds() == [2]
        assert Like.objects.filter(post_id=POST, reaction_type=0, user_id=USER).count() == 0

    def test_one_vote_per_user(self):
        users = [USER, USER + 1, USER + 2]
        presses = [0, 1, 1, 2, 0, 0, 2, 1, 1, 0]
        for i, kind in enumerate(presses):
            Like.objects.toggle(POST, kind, users[i % len(users)])
            Like.objects.toggle(POST, (kind + 1) % 3, users[(i + 1) % len(users)])
            for user in users:
                assert Like.objects.filter(post_id=POST, user_id=user).count() <= 1

    def test_other_users_and_posts_untouched(self):
        Like.objects.toggle(POST, 0, USER + 1)
        Like.objects.toggle(POST + 1, 0, USER)
        Like.objects.toggle(POST, 0, USER)
        Like.objects.toggle(POST, 0, USER)
        assert self.kinds() == []
        assert self.kinds(user_id=USER + 1) == [0]
        assert self.kinds(post_id=POST + 1) == [0]

    def test_duplicated_rows(self):
        # leftovers from some old anomaly: even number of rows looks like "not voted"
        Like.objects.create(post_id=POST, reaction_type=1, user_id=USER)
        Like.objects.create(post_id=POST, reaction_type=1, user_id=USER)
        assert Like.objects.toggle(POST, 1, USER)
        assert self.kinds() == [1]


@pytest.mark.django_db
class TestLikeTally:
    def test_unknown_post(self):
        assert Like.objects.tally(POST, 3) == [0, 0, 0]

    def test_counts(self):
        # order of votes doesn't matter
        Like.objects.toggle(POST, 2, USER)
        Like.objects.toggle(POST, 0, USER + 1)
        Like.objects.toggle(POST, 0, USER + 2)
        Like.objects.toggle(POST + 1, 1, USER)
        assert Like.objects.tally(POST, 3) == [2, 0, 1]
        assert Like.objects.tally(POST + 1, 3) == [0, 1, 0]

    def test_bad_reaction_type(self):
        Like.objects.create(post_id=POST, reaction_type=3, user_id=USER)
        with pytest.raises(ConsistencyError):
            Like.objects.tally(POST, 3)


@pytest.mark.django_db
class TestAuthor:
    def test_record(self):
        author = Author.objects.record(POST, USER)
        assert (author.post_id, author.author_id) == (POST, USER)
        assert Author.objects.filter(post_id=POST).count() == 1

    def test_record_twice(self):
        Author.objects.record(POST, USER)
        Author.objects.record(POST, USER)
        assert list(Author.objects.values_list('post_id', 'author_id')) == [(POST, USER)]

    def test_same_post_from_two_chats(self):
        Author.objects.record(POST, USER)
        Author.objects.record(POST, USER + 1)
        rows = Author.objects.order_by('author_id').values_list('post_id', 'author_id')
        assert list(rows) == [(POST, USER), (POST, USER + 1)]


@pytest.mark.django_db
class TestUnsupportedMessage:
    def test_link(self):
        UnsupportedMessage.objects.link(POST, POST + 1)
        rows = UnsupportedMessage.objects.values_list('forwarded_post_id', 'keyboard_post_id')
        assert list(rows) == [(POST, POST + 1)]
