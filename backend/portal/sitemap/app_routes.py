"""Tenant application: Tenant-Admin and End-User screens."""
from portal.constants.roles import TENANT_ADMIN, END_USER
from portal.services.routing import route

_TENANT = [TENANT_ADMIN, END_USER]

APP_ROUTES = [
    route('app.dashboard', '/app/dashboard', 'app/Dashboard', _TENANT),
    route('tenantDashboard', '/app/tenant-dashboard', 'app/TenantDashboard', _TENANT),
    route('app.reports', '/app/reports', 'app/reports/ReportListPage', _TENANT),
    route('app.reports.view', '/app/reports/:id', 'app/reports/ReportViewPage', _TENANT),
    route('app.users', '/app/users', 'app/users/UserListPage', [TENANT_ADMIN]),
    route('app.users.create', '/app/users/create', 'app/users/UserCreatePage', [TENANT_ADMIN]),
    route('app.users.edit', '/app/users/edit/:id', 'app/users/UserEditPage', [TENANT_ADMIN]),
    route('shopKPI.shopProperties', '/app/shop-properties', 'app/shop-kpi/ShopPropertiesPage', _TENANT + ['shops.read']),
    route('shopKPI.shopKpi', '/app/shop-kpi', 'app/shop-kpi/ShopKpiPage', _TENANT + ['shopkpi.read']),
    route('accounting.chartOfAccounts', '/accounting/chart-of-accounts', 'accounting/ChartOfAccountsPage', _TENANT + ['accounting.read']),
    route('accounting.shopChartOfAccount', '/accounting/shop-chart-of-account', 'accounting/ShopChartOfAccountPage', _TENANT + ['accounting.read']),
    route('accounting.uploadGL', '/accounting/upload-gl', 'accounting/UploadGLPage', _TENANT + ['accounting.upload']),
    route('subscriptions', '/subscriptions', 'app/subscriptions/SubscriptionsPage', _TENANT),
    route('reports', '/reports', 'app/reports/ReportGalleryPage', [END_USER, 'report.read', 'report.all']),
    route('dashboard', '/dashboard', 'app/Dashboard', _TENANT),
    route('app.programs', '/app/programs', 'app/programs/ProgramListPage', _TENANT + ['programs.read']),
    route('app.programs.add', '/app/programs/add', 'app/programs/ProgramFormPage', [TENANT_ADMIN]),
    route('app.programs.edit', '/app/programs/edit/:programId', 'app/programs/ProgramFormPage', [TENANT_ADMIN]),
    route('app.programs.assign-shops', '/app/programs/:programId/assign-shops', 'app/programs/AssignShopsPage', _TENANT),
    route('app.programs.assignments', '/app/programs/:programId/assignments', 'app/programs/ProgramAssignmentsPage', _TENANT),
    route('app.settings', '/app/settings', 'app/settings/SettingsPage', [TENANT_ADMIN]),
    route('app.activityLog', '/app/activity-log', 'app/settings/ActivityLogPage', ['system.logs']),
]
