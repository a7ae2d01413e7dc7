from django.urls import path
from .views import projects, shared_project, project_cut_lists, cut_list_detail, cut_list_toggle_complete

urlpatterns = [
    *projects.urlpatterns('projects'),

    # Public share link
    path('shared/projects/<uuid:token>/', shared_project, name='shared-project'),

    # Cut list endpoints
    path('projects/<int:pk>/cut-lists/', project_cut_lists, name='project-cut-lists'),
    path('cut-lists/<int:pk>/', cut_list_detail, name='cut-list-detail'),
    path('cut-lists/<int:pk>/toggle-complete/', cut_list_toggle_complete, name='cut-list-toggle-complete'),
]
