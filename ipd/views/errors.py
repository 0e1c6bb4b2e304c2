from django.http import JsonResponse


def not_found(request, exception=None):
    """Unmatched URLs answer in the API envelope instead of an HTML page."""
    return JsonResponse({'success': False, 'message': 'Not found'}, status=404)
