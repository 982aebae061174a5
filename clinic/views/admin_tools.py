"""Admin dashboard, notifications and maintenance."""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic import session
from clinic.permissions import AdminOnly
from clinic.serializers.workflow import LogoUploadSerializer
from clinic.services import hospital_settings, maintenance, notifications
from clinic.services.dashboard import dashboard_stats
from clinic.views.common import respond


@api_view(['GET'])
@permission_classes([AdminOnly])
def dashboard(request):
    return Response({'success': True, 'data': dashboard_stats()})


@api_view(['GET'])
@permission_classes([AdminOnly])
def notification_list(request):
    feed = notifications.NotificationFeed()
    result = feed.load()
    if not result.success:
        return respond(result)
    return Response({'success': True, 'data': feed.snapshot()})


@api_view(['POST'])
@permission_classes([AdminOnly])
def notification_mark_all_read(request):
    return respond(notifications.mark_all_read())


@api_view(['POST'])
@permission_classes([AdminOnly])
def reset_data(request):
    """Delete all patients, appointments and bills."""
    return respond(maintenance.reset_all_data(actor=session.context_for(request).actor))


@api_view(['POST'])
@permission_classes([AdminOnly])
def upload_logo(request):
    s = LogoUploadSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return respond(hospital_settings.upload_logo(s.validated_data['file']))
