from .views import lumber, finishes, sheet_goods, consumables, tools

urlpatterns = [
    *lumber.urlpatterns('lumber'),
    *finishes.urlpatterns('finishes'),
    *sheet_goods.urlpatterns('sheet-goods'),
    *consumables.urlpatterns('consumables'),
    *tools.urlpatterns('tools'),
]
