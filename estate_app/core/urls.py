# لا توجد واجهات HTTP في هذا المشروع؛ العمليات متاحة عبر الخدمات وأوامر الإدارة
urlpatterns = []
