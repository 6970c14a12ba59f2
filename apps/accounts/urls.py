from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    path('login', views.login, name='login'),
    path('refresh-token', views.refresh_token, name='refresh-token'),
    path('logout', views.logout, name='logout'),
    path('me', views.get_current_user, name='current-user'),
]
