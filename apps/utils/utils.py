# utils/utils.py

from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


# =============================================================================
# PAGINATION HELPERS
# =============================================================================

def get_page_size(request, default=DEFAULT_PAGE_SIZE):
    """``?page_size=`` clamped to 1..MAX_PAGE_SIZE; junk falls back to default."""
    try:
        size = int(request.GET.get('page_size', default))
    except (TypeError, ValueError):
        return default
    return max(1, min(size, MAX_PAGE_SIZE))


def paginate_queryset(request, queryset, per_page=None):
    paginator = Paginator(queryset, per_page or get_page_size(request))
    page = request.GET.get('page', 1)
    try:
        page_obj = paginator.page(page)
    except PageNotAnInteger:
        page_obj = paginator.page(1)
    except EmptyPage:
        page_obj = paginator.page(paginator.num_pages)
    return page_obj, paginator


def paginated_payload(request, queryset, key, serializer):
    """
    Serialize one page of a queryset for a list endpoint.

    Returns:
        dict: {key: [...], 'page', 'num_pages', 'count'}
    """
    page_obj, paginator = paginate_queryset(request, queryset)
    return {
        key: [serializer(obj) for obj in page_obj],
        'page': page_obj.number,
        'num_pages': paginator.num_pages,
        'count': paginator.count,
    }
