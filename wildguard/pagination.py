from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CustomPageNumberPagination(PageNumberPagination):
    """
    ``?page=<n>&limit=<size>`` pagination for every list endpoint.

    ``limit`` is capped at ``max_page_size``. Results come back under
    ``results`` next to ``count``, ``total_pages``, ``current_page``,
    ``page_size``, ``has_next`` and ``has_previous``, so clients never follow
    next/previous links.
    """
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100

    def page_metadata(self):
        paginator = self.page.paginator
        return {
            'count': paginator.count,
            'total_pages': paginator.num_pages,
            'current_page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'has_next': self.page.has_next(),
            'has_previous': self.page.has_previous(),
        }

    def get_paginated_response(self, data):
        return Response({**self.page_metadata(), 'results': data})

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'count': {'type': 'integer'},
                'total_pages': {'type': 'integer'},
                'current_page': {'type': 'integer'},
                'page_size': {'type': 'integer'},
                'has_next': {'type': 'boolean'},
                'has_previous': {'type': 'boolean'},
                'results': schema,
            },
        }


class SmallPageNumberPagination(CustomPageNumberPagination):
    """Ten per page, used by the admin user directory."""
    page_size = 10
