from django.test import SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from users.models import User
from medical_officers.models import MedicalOfficer
from articles.models import Article
from articles.workflow import (
    InvalidTransition, next_status, author_can_modify, TRANSITIONS,
    DRAFT, PENDING_REVIEW, APPROVED, PUBLISHED, REJECTED
)


class WorkflowTestCase(SimpleTestCase):
    """Test cases for the article status machine"""

    def test_happy_path(self):
        status_ = DRAFT
        for action_name, expected in [('submit', PENDING_REVIEW), ('approve', APPROVED), ('publish', PUBLISHED)]:
            status_ = next_status(status_, action_name)
            self.assertEqual(status_, expected)

    def test_submit_requires_draft(self):
        """Only drafts can be submitted"""
        for current in (PENDING_REVIEW, APPROVED, PUBLISHED, REJECTED):
            with self.assertRaises(InvalidTransition):
                next_status(current, 'submit')

    def test_approve_requires_pending_review(self):
        for current in (DRAFT, APPROVED, PUBLISHED, REJECTED):
            with self.assertRaises(InvalidTransition) as ctx:
                next_status(current, 'approve')
            self.assertEqual(str(ctx.exception), 'Article is not pending review')

    def test_publish_requires_approved(self):
        with self.assertRaises(InvalidTransition):
            next_status(PENDING_REVIEW, 'publish')

    def test_rejected_goes_back_to_review_queue(self):
        self.assertEqual(next_status(REJECTED, 're_review'), PENDING_REVIEW)

    def test_unpublish_and_cancel_revert_to_draft(self):
        self.assertEqual(next_status(PUBLISHED, 'unpublish'), DRAFT)
        self.assertEqual(next_status(PENDING_REVIEW, 'cancel_pending'), DRAFT)

    def test_unknown_action(self):
        with self.assertRaises(InvalidTransition) as ctx:
            next_status(DRAFT, 'archive')
        self.assertEqual(str(ctx.exception), 'Invalid action')

    def test_each_action_has_a_single_source(self):
        for action_name, (source, target, message) in TRANSITIONS.items():
            self.assertNotEqual(source, target, action_name)
            self.assertTrue(message)

    def test_author_can_modify(self):
        self.assertTrue(author_can_modify(DRAFT))
        self.assertTrue(author_can_modify(REJECTED))
        self.assertFalse(author_can_modify(PUBLISHED))


def make_medical_officer(email='mo@test.com', license_number='LIC-001'):
    user = User.objects.create_user(username=email, email=email, password='officerpass', name='Dr. Officer')
    user.add_role('medical_officer')
    MedicalOfficer.objects.create(user=user, specialization='general', license_number=license_number,
                                  is_approved=True)
    return user


def make_admin(email='admin@test.com'):
    admin = User.objects.create_user(username=email, email=email, password='adminpass123', name='Admin Reviewer')
    admin.add_role('admin')
    return admin


@override_settings(ALLOWED_HOSTS=['*'])
class MedicalOfficerArticleTestCase(APITestCase):
    """Test cases for articles managed by their authoring officer"""

    url = '/api/medical-officer/articles/'

    def setUp(self):
        self.officer = make_medical_officer()
        self.client.force_authenticate(user=self.officer)
        self.article_data = {
            'title': '  Snake bite first aid ',
            'content': 'Keep the patient calm and still.',
            'category': 'medical_advice',
            'tags': ['snakes', 'first aid'],
            'images': [{'url': '/uploads/snake.jpg', 'alt': 'Puff adder'}, 'not-an-image'],
        }

    def create_article(self, **overrides):
        data = dict(self.article_data, **overrides)
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['article']

    def test_create_starts_as_draft(self):
        """New articles are drafts with normalized fields"""
        article = self.create_article()

        self.assertEqual(article['status'], 'draft')
        self.assertEqual(article['title'], 'Snake bite first aid')
        self.assertEqual(article['author']['type'], 'medical_officer')
        self.assertEqual(article['images'], [{'url': '/uploads/snake.jpg', 'alt': 'Puff adder'}])

    def test_create_requires_fields(self):
        response = self.client.post(self.url, {'title': 'Only a title'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Title, content, and category are required')

    def test_create_rejects_unknown_category(self):
        response = self.client.post(self.url, dict(self.article_data, category='gossip'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid category', response.data['error'])

    def test_my_articles_lists_only_own(self):
        self.create_article()
        other = make_medical_officer(email='other@test.com', license_number='LIC-002')
        Article.objects.create(title='Other', content='x', category='prevention', author=other)

        response = self.client.get(self.url + 'my-articles/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_other_officer_cannot_edit(self):
        """Only the author may touch an article"""
        article = self.create_article()
        other = make_medical_officer(email='other@test.com', license_number='LIC-002')
        self.client.force_authenticate(user=other)

        response = self.client.put(f"{self.url}{article['id']}/", {'title': 'Hijacked'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Access denied')

    def test_submit_non_draft_rejected(self):
        article = self.create_article()
        self.client.post(f"{self.url}{article['id']}/submit/")

        response = self.client.post(f"{self.url}{article['id']}/submit/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Article is not in draft status')

    def test_published_article_is_immutable(self):
        """Published articles reject edit and delete attempts from the author"""
        article = Article.objects.create(title='Live', content='x', category='prevention',
                                         author=self.officer, status='published')

        response = self.client.patch(f"{self.url}{article.id}/", {'title': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot edit published articles')

        response = self.client.delete(f"{self.url}{article.id}/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete published articles')

        article.refresh_from_db()
        self.assertEqual(article.title, 'Live')

    def test_update_and_delete_draft(self):
        article = self.create_article()

        response = self.client.patch(f"{self.url}{article['id']}/", {'excerpt': 'Short version'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['excerpt'], 'Short version')

        response = self.client.delete(f"{self.url}{article['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Article.objects.filter(id=article['id']).exists())

    def test_review_scenario(self):
        """Draft, submit, reject with a reason, then back to the review queue"""
        article = self.create_article()
        self.assertEqual(article['status'], 'draft')

        response = self.client.post(f"{self.url}{article['id']}/submit/")
        self.assertEqual(response.data['article']['status'], 'pending_review')

        admin = make_admin()
        self.client.force_authenticate(user=admin)
        response = self.client.put(f"/api/admin/articles/{article['id']}/reject/",
                                   {'reason': 'Cite a source for the antivenom dosage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['status'], 'rejected')
        self.assertEqual(response.data['article']['reviewer']['comments'], 'Cite a source for the antivenom dosage')
        self.assertEqual(response.data['article']['reviewer']['name'], 'Admin Reviewer')

        self.client.force_authenticate(user=self.officer)
        response = self.client.post(f"{self.url}{article['id']}/re_review/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['status'], 'pending_review')

        stored = Article.objects.get(id=article['id'])
        self.assertEqual(stored.review_comments, 'Cite a source for the antivenom dosage')

    def test_pending_officer_forbidden(self):
        self.officer.medical_officer.is_approved = False
        self.officer.medical_officer.save()

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(ALLOWED_HOSTS=['*'])
class AdminArticleTestCase(APITestCase):
    """Test cases for the admin moderation endpoints"""

    def setUp(self):
        self.admin = make_admin()
        self.officer = make_medical_officer()
        self.client.force_authenticate(user=self.admin)
        self.article = Article.objects.create(title='Elephant safety', content='Keep your distance.',
                                              category='wildlife_safety', author=self.officer,
                                              status='pending_review')

    def url(self, suffix=''):
        return f'/api/admin/articles/{self.article.id}/{suffix}'

    def test_list_filters_by_status(self):
        Article.objects.create(title='Draft', content='x', category='prevention', author=self.officer)

        response = self.client.get('/api/admin/articles/', {'status': 'pending_review'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['title'], 'Elephant safety')

    def test_approve_then_publish(self):
        response = self.client.put(self.url('approve/'), {'comments': 'Looks good'}, format='json')
        self.assertEqual(response.data['article']['status'], 'approved')

        response = self.client.post(self.url('publish/'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['status'], 'published')
        self.assertIsNotNone(response.data['article']['published_at'])

    def test_approve_non_pending_rejected(self):
        self.article.status = 'draft'
        self.article.save()

        response = self.client.put(self.url('approve/'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Article is not pending review')

    def test_publish_requires_approval(self):
        response = self.client.post(self.url('publish/'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Article is not approved')

    def test_reject_requires_reason(self):
        response = self.client.put(self.url('reject/'), {'reason': '   '}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'A rejection reason is required')
        self.article.refresh_from_db()
        self.assertEqual(self.article.status, 'pending_review')

    def test_moderation_accepts_post_and_put(self):
        """Review, approve and reject answer both POST and PUT"""
        response = self.client.post(self.url('approve/'), {'comments': 'Fine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['reviewer']['comments'], 'Fine')

        self.article.status = 'pending_review'
        self.article.save()
        response = self.client.post(self.url('reject/'), {'rejection_reason': 'Needs sources'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['reviewer']['comments'], 'Needs sources')

        self.article.status = 'pending_review'
        self.article.save()
        response = self.client.post(self.url('review/'), {'action': 'approve'}, format='json')
        self.assertEqual(response.data['article']['status'], 'approved')

    def test_non_object_body_is_bad_request(self):
        for suffix in ('approve/', 'reject/', 'review/'):
            response = self.client.post(self.url(suffix), ['not', 'an', 'object'], format='json')

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.article.refresh_from_db()
        self.assertEqual(self.article.status, 'pending_review')

    def test_review_endpoint(self):
        response = self.client.put(self.url('review/'), {'action': 'delete'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid action')

        response = self.client.put(self.url('review/'), {'action': 'reject', 'comments': 'Too vague'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['article']['status'], 'rejected')

    def test_cancel_pending_and_unpublish(self):
        response = self.client.post(self.url('cancel_pending/'))
        self.assertEqual(response.data['article']['status'], 'draft')

        self.article.status = 'published'
        self.article.save()
        response = self.client.post(self.url('unpublish/'))
        self.assertEqual(response.data['article']['status'], 'draft')
        self.assertIsNone(response.data['article']['published_at'])

    def test_admin_authored_article(self):
        response = self.client.post('/api/admin/articles/', {
            'title': 'Rabies alert', 'content': 'Vaccinate pets.', 'category': 'prevention'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['article']['author']['type'], 'admin')
        self.assertEqual(response.data['article']['status'], 'draft')

    def test_officer_cannot_moderate(self):
        self.client.force_authenticate(user=self.officer)

        response = self.client.put(self.url('approve/'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(ALLOWED_HOSTS=['*'])
class PublicArticleTestCase(APITestCase):
    """Test cases for the public article feed"""

    def setUp(self):
        officer = make_medical_officer()
        self.published = Article.objects.create(title='Crocodile awareness', content='Avoid river banks at dusk.',
                                                category='wildlife_safety', author=officer, status='published')
        Article.objects.create(title='Unreleased draft', content='x', category='wildlife_safety', author=officer)

    def test_only_published_are_listed(self):
        response = self.client.get('/api/articles/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_search(self):
        response = self.client.get('/api/articles/', {'search': 'river'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/articles/', {'search': 'Unreleased'})
        self.assertEqual(response.data['count'], 0)

    def test_category(self):
        response = self.client.get('/api/articles/category/wildlife_safety/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/articles/category/astrology/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid category')

    def test_retrieve_counts_views(self):
        self.client.get(f'/api/articles/{self.published.id}/')
        response = self.client.get(f'/api/articles/{self.published.id}/')

        self.assertEqual(response.data['view_count'], 2)

    def test_draft_not_retrievable(self):
        draft = Article.objects.get(title='Unreleased draft')

        response = self.client.get(f'/api/articles/{draft.id}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
