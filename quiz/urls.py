# quiz/urls.py
from django.urls import path
from . import views

urlpatterns = [
    path('process', views.process, name='process'),
    path('process/', views.process),

    path('quizzes/', views.quiz_list, name='quiz_list'),
    path('quizzes/<uuid:quiz_id>/', views.quiz_detail, name='quiz_detail'),

    path('flashcards/', views.flashcard_list, name='flashcard_list'),
    path('flashcards/<uuid:flashcard_id>/', views.flashcard_detail, name='flashcard_detail'),

    path('summaries/', views.summary_list, name='summary_list'),
    path('summaries/<uuid:summary_id>/', views.summary_detail, name='summary_detail'),
]
