# chatbot/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('', views.chatbot_api, name='chatbot_api'),
]
