import shutil
import tempfile
from io import BytesIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from users.models import User
from community.models import Post, Comment
from community.reactions import (
    InvalidReaction, apply_reaction, reaction_counts, user_reaction, summarize, toggle_like
)

MEDIA_ROOT = tempfile.mkdtemp()


class ReactionFunctionsTestCase(SimpleTestCase):
    """Test cases for the reaction list helpers"""

    def test_second_reaction_replaces_first(self):
        """A user keeps exactly one reaction per entity"""
        reactions = apply_reaction([], 'uid-1', 'Amina', 'like')
        reactions = apply_reaction(reactions, 'uid-1', 'Amina', 'wow')

        self.assertEqual(len(reactions), 1)
        self.assertEqual(reactions[0]['type'], 'wow')

    def test_other_users_are_kept(self):
        reactions = apply_reaction([], 'uid-1', 'Amina', 'like')
        reactions = apply_reaction(reactions, 'uid-2', 'Baraka', 'sad')
        reactions = apply_reaction(reactions, 'uid-1', 'Amina', 'love')

        self.assertEqual(reaction_counts(reactions), {'sad': 1, 'love': 1})
        self.assertEqual(user_reaction(reactions, 'uid-2'), 'sad')
        self.assertIsNone(user_reaction(reactions, 'uid-3'))

    def test_unknown_type_rejected(self):
        with self.assertRaises(InvalidReaction):
            apply_reaction([], 'uid-1', 'Amina', 'meh')

    def test_input_list_not_mutated(self):
        original = [{'type': 'like', 'user_id': 'uid-1', 'user_name': 'Amina'}]
        apply_reaction(original, 'uid-1', 'Amina', 'angry')

        self.assertEqual(original[0]['type'], 'like')

    def test_summary(self):
        reactions = [
            {'type': 'laugh', 'user_id': 'a', 'user_name': 'A'},
            {'type': 'laugh', 'user_id': 'b', 'user_name': 'B'},
        ]
        self.assertEqual(summarize(reactions, 'b'), {
            'reaction_counts': {'laugh': 2}, 'total_reactions': 2, 'user_reaction': 'laugh'
        })
        self.assertEqual(summarize(None)['total_reactions'], 0)

    def test_toggle_like(self):
        liked_by, liked = toggle_like([], 'uid-1')
        self.assertTrue(liked)
        liked_by, liked = toggle_like(liked_by, 'uid-1')
        self.assertFalse(liked)
        self.assertEqual(liked_by, [])


def make_member(uid, name):
    user, _ = User.objects.sync_firebase_user(uid, email=f'{uid}@test.com', name=name)
    return user


def make_photo():
    buffer = BytesIO()
    Image.new('RGB', (10, 10), color='green').save(buffer, format='PNG')
    return SimpleUploadedFile('lion.png', buffer.getvalue(), content_type='image/png')


@override_settings(ALLOWED_HOSTS=['*'], MEDIA_ROOT=MEDIA_ROOT)
class PostTestCase(APITestCase):
    """Test cases for posts, likes and reactions"""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.author = make_member('uid-author', 'Amina')
        self.other = make_member('uid-other', 'Baraka')
        self.post = Post.objects.create(animal_name='Leopard', experience='Spotted one near camp.', author=self.author)

    def test_list_is_public_with_embedded_comments(self):
        comment = Comment.objects.create(post=self.post, author=self.other, text='Scary!')
        Comment.objects.create(post=self.post, author=self.author, text='It was.', parent=comment)

        response = self.client.get('/api/posts/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        post = response.data['results'][0]
        self.assertEqual(post['comment_count'], 2)
        self.assertEqual(len(post['comments']), 1)
        self.assertEqual(post['comments'][0]['replies'][0]['text'], 'It was.')

    def test_create_with_photo(self):
        """Posts accept a multipart photo upload"""
        self.client.force_authenticate(user=self.author)

        response = self.client.post('/api/posts/', {
            'animal_name': 'Lion',
            'experience': 'Heard roaring all night.',
            'photo': make_photo(),
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['photo_url'].startswith('/uploads/posts/'))
        self.assertEqual(response.data['author']['id'], 'uid-author')

    def test_create_requires_fields(self):
        self.client.force_authenticate(user=self.author)

        response = self.client.post('/api/posts/', {'animal_name': 'Lion'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Animal name and experience are required')

    def test_create_requires_login(self):
        response = self.client.post('/api/posts/', {'animal_name': 'Lion', 'experience': 'x'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_only_author_can_edit_or_delete(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.patch(f'/api/posts/{self.post.id}/', {'experience': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(f'/api/posts/{self.post.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_removes_comments(self):
        Comment.objects.create(post=self.post, author=self.other, text='Nice')
        self.client.force_authenticate(user=self.author)

        response = self.client.delete(f'/api/posts/{self.post.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Comment.objects.exists())

    def test_like_toggle(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.post(f'/api/posts/{self.post.id}/like/')
        self.assertTrue(response.data['liked'])
        self.assertEqual(response.data['likes'], 1)

        response = self.client.post(f'/api/posts/{self.post.id}/like/')
        self.assertFalse(response.data['liked'])
        self.assertEqual(response.data['likes'], 0)

    def test_reacting_twice_keeps_one_reaction(self):
        """The same user reacting again replaces their earlier reaction"""
        self.client.force_authenticate(user=self.other)

        self.client.post(f'/api/posts/{self.post.id}/react/', {'type': 'like'}, format='json')
        response = self.client.post(f'/api/posts/{self.post.id}/react/', {'type': 'love'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_reactions'], 1)
        self.assertEqual(response.data['reaction_counts'], {'love': 1})
        self.assertEqual(response.data['user_reaction'], 'love')

        self.post.refresh_from_db()
        mine = [r for r in self.post.reactions if r['user_id'] == 'uid-other']
        self.assertEqual(len(mine), 1)

    def test_invalid_reaction_type(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.post(f'/api/posts/{self.post.id}/react/', {'type': 'meh'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid reaction type')

    def test_react_with_non_object_body(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.post(f'/api/posts/{self.post.id}/react/', ['love'], format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.post.refresh_from_db()
        self.assertEqual(self.post.reactions, [])

    def test_reactions_summary_is_public(self):
        self.post.reactions = [{'type': 'wow', 'user_id': 'uid-other', 'user_name': 'Baraka'}]
        self.post.save()

        response = self.client.get(f'/api/posts/{self.post.id}/reactions/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['reaction_counts'], {'wow': 1})
        self.assertIsNone(response.data['user_reaction'])

    def test_unknown_post(self):
        response = self.client.get('/api/posts/not-a-uuid/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(ALLOWED_HOSTS=['*'])
class CommentTestCase(APITestCase):
    """Test cases for comments and replies"""

    def setUp(self):
        self.author = make_member('uid-author', 'Amina')
        self.other = make_member('uid-other', 'Baraka')
        self.post = Post.objects.create(animal_name='Hippo', experience='Charged our boat.', author=self.author)
        self.url = f'/api/posts/{self.post.id}/comments/'

    def test_comment_and_reply(self):
        self.client.force_authenticate(user=self.other)

        response = self.client.post(self.url, {'text': ' Stay safe '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['text'], 'Stay safe')
        parent_id = response.data['id']

        response = self.client.post(self.url, {'text': 'Thanks', 'parent_id': parent_id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data['parent_id']), parent_id)

        response = self.client.get(self.url)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(len(response.data[0]['replies']), 1)

    def test_reply_parent_must_belong_to_post(self):
        other_post = Post.objects.create(animal_name='Buffalo', experience='x', author=self.other)
        foreign = Comment.objects.create(post=other_post, author=self.other, text='Elsewhere')
        self.client.force_authenticate(user=self.author)

        response = self.client.post(self.url, {'text': 'Reply', 'parent_id': str(foreign.id)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_edit_marks_comment_edited(self):
        comment = Comment.objects.create(post=self.post, author=self.other, text='Typo')
        self.client.force_authenticate(user=self.other)

        response = self.client.put(f'{self.url}{comment.id}/', {'text': 'Fixed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_edited'])

    def test_only_author_can_delete(self):
        comment = Comment.objects.create(post=self.post, author=self.other, text='Mine')
        self.client.force_authenticate(user=self.author)

        response = self.client.delete(f'{self.url}{comment.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'You can only delete your own comments')

    def test_comment_reactions(self):
        comment = Comment.objects.create(post=self.post, author=self.other, text='Wow')
        self.client.force_authenticate(user=self.author)

        self.client.post(f'{self.url}{comment.id}/react/', {'type': 'laugh'}, format='json')
        self.client.post(f'{self.url}{comment.id}/react/', {'type': 'laugh'}, format='json')
        response = self.client.get(f'{self.url}{comment.id}/reactions/')

        self.assertEqual(response.data['total_reactions'], 1)
        self.assertEqual(response.data['user_reaction'], 'laugh')

    def test_comment_like(self):
        comment = Comment.objects.create(post=self.post, author=self.other, text='Like me')
        self.client.force_authenticate(user=self.author)

        response = self.client.post(f'{self.url}{comment.id}/like/')

        self.assertEqual(response.data['likes'], 1)
        self.assertEqual(response.data['liked_by'], ['uid-author'])

    def test_comments_of_unknown_post(self):
        response = self.client.get('/api/posts/00000000-0000-0000-0000-000000000000/comments/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
