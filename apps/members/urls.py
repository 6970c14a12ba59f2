from django.urls import path
from . import views

app_name = 'members'

urlpatterns = [
    # GET /api/members/{ward}/{house}/ - Member lookup
    path('<int:ward>/<int:house>/', views.member_detail, name='member-detail'),
]
