"""CS-Admin portal, plus the tenant administration screens mounted under it."""
from portal.constants.roles import CS_ADMIN, CS_USER, TENANT_ADMIN
from portal.services.routing import route

_CS = [CS_ADMIN, CS_USER]

TENANT_PORTAL_ROUTES = [
    route('tenantportal.dashboard', '/tenantportal/dashboard', 'admin/dashboard/CSAdminDashboard', [CS_ADMIN]),
    route('tenantportal.users', '/tenantportal/users', 'admin/users/UserListPage', [CS_ADMIN]),
    route('tenantportal.users.create', '/tenantportal/users/create', 'admin/users/UserCreatePage', [CS_ADMIN]),
    route('tenantportal.users.edit', '/tenantportal/users/edit/:id', 'admin/users/UserEditPage', [CS_ADMIN]),
    route('tenantportal.customers', '/tenantportal/customers', 'admin/customers/CustomerListPage', [CS_ADMIN]),
    route('tenantportal.customers.create', '/tenantportal/customers/create', 'admin/customers/CustomerCreateWizard', [CS_ADMIN]),
    route('tenantportal.customers.edit', '/tenantportal/customers/edit/:id', 'admin/customers/EditCustomerPage', [CS_ADMIN]),
    route('tenantportal.roles', '/tenantportal/roles', 'admin/roles/RoleListPage', [CS_ADMIN]),
    route('tenantportal.roles.create', '/tenantportal/roles/create', 'admin/roles/RoleCreatePage', [CS_ADMIN]),
    route('tenantportal.roles.edit', '/tenantportal/roles/edit/:id', 'admin/roles/RoleEditPage', [CS_ADMIN]),
    route('tenantportal.features', '/tenantportal/features', 'admin/features/FeatureManagementPage', _CS),
    route('tenantportal.features.all', '/tenantportal/cs-admin/features', 'admin/features/AllFeaturesPage', _CS),
    route('tenantportal.features.tenant-features', '/tenantportal/cs-admin/tenant-features', 'admin/features/TenantFeaturesPage', _CS),

    # tenant administration
    route('adminMenu.users', '/tenantportal/tenant/users', 'tenant-admin/users/TenantUserListPage', [TENANT_ADMIN, 'users.read']),
    route('adminMenu.users.create', '/tenantportal/tenant/users/create', 'tenant-admin/users/TenantUserCreatePage', [TENANT_ADMIN, 'users.write']),
    route('adminMenu.users.edit', '/tenantportal/tenant/users/edit/:userId', 'tenant-admin/users/TenantUserEditPage', [TENANT_ADMIN, 'users.write']),
    route('adminMenu.users.assign-shops', '/tenantportal/tenant/users/assign-shops/:userId', 'tenant-admin/users/AssignShopsPage', [TENANT_ADMIN]),
    route('adminMenu.users.assign-reports', '/tenantportal/tenant/users/assign-reports/:userId', 'tenant-admin/users/AssignReportsPage', [TENANT_ADMIN]),
    route('adminMenu.roles', '/tenantportal/tenant/roles', 'tenant-admin/roles/TenantRoleListPage', [TENANT_ADMIN, 'roles.read']),
    route('adminMenu.roles.create', '/tenantportal/tenant/roles/create', 'tenant-admin/roles/TenantRoleCreatePage', [TENANT_ADMIN, 'roles.write']),
    route('adminMenu.roles.edit', '/tenantportal/tenant/roles/edit/:id', 'tenant-admin/roles/TenantRoleEditPage', [TENANT_ADMIN, 'roles.write']),
    route('adminMenu.roles.permissions', '/tenantportal/tenant/roles/permissions/:roleId', 'tenant-admin/roles/RolePermissionsPage', [TENANT_ADMIN, 'roles.write']),
    route('adminMenu.roles.users', '/tenantportal/tenant/roles/users/:roleId', 'tenant-admin/roles/RoleUsersPage', [TENANT_ADMIN]),
    route('adminMenu.workspaces', '/tenantportal/tenant/workspaces', 'tenant-admin/workspaces/WorkspaceListPage', [TENANT_ADMIN]),
    route('adminMenu.workspaces.import-status', '/tenantportal/tenant/workspaces/import-status', 'tenant-admin/workspaces/ImportStatusPage', [TENANT_ADMIN]),
    route('adminMenu.workspaces.details', '/tenantportal/tenant/workspaces/:workspaceId', 'tenant-admin/workspaces/WorkspaceDetailsPage', [TENANT_ADMIN]),
    route('adminMenu.workspaces.edit', '/tenantportal/tenant/workspaces/:workspaceId/edit', 'tenant-admin/workspaces/WorkspaceEditPage', [TENANT_ADMIN]),
    route('adminMenu.workspaces.assignments', '/tenantportal/tenant/workspaces/:workspaceId/assignments', 'tenant-admin/workspaces/WorkspaceAssignmentsPage', [TENANT_ADMIN]),
    route('adminMenu.reportCategories', '/tenantportal/tenant/report-categories', 'tenant-admin/report-categories/ReportCategoryListPage', [TENANT_ADMIN, 'reportcategory.read']),
    route('adminMenu.reportCategories.new', '/tenantportal/tenant/report-categories/new', 'tenant-admin/report-categories/ReportCategoryFormPage', [TENANT_ADMIN, 'reportcategory.write']),
    route('adminMenu.reportCategories.details', '/tenantportal/tenant/report-categories/:categoryId', 'tenant-admin/report-categories/ReportCategoryDetailsPage', [TENANT_ADMIN, 'reportcategory.read']),
    route('adminMenu.reportCategories.edit', '/tenantportal/tenant/report-categories/:categoryId/edit', 'tenant-admin/report-categories/ReportCategoryFormPage', [TENANT_ADMIN, 'reportcategory.write']),
    route('adminMenu.reportCategories.assignments', '/tenantportal/tenant/report-categories/:categoryId/assignments', 'tenant-admin/report-categories/ReportCategoryAssignmentsPage', [TENANT_ADMIN]),
    route('adminMenu.reports', '/tenantportal/tenant/reports', 'tenant-admin/reports/ReportManagementPage', [TENANT_ADMIN]),
    route('tenantportal.tenant.reports.bulk-assign', '/tenantportal/tenant/reports/bulk-assign', 'tenant-admin/reports/BulkAssignPage', [TENANT_ADMIN]),
    route('tenantportal.tenant.reports.new', '/tenantportal/tenant/reports/new', 'tenant-admin/reports/ReportFormPage', [TENANT_ADMIN, 'report.write']),
    route('tenantportal.tenant.reports.edit', '/tenantportal/tenant/reports/:id/edit', 'tenant-admin/reports/ReportFormPage', [TENANT_ADMIN, 'report.write']),
    route('tenantportal.tenant.reports.assignments', '/tenantportal/tenant/reports/:id/assignments', 'tenant-admin/reports/ReportAssignmentsPage', [TENANT_ADMIN]),
    route('tenantportal.tenant.reports.view', '/tenantportal/tenant/reports/:id/view', 'tenant-admin/reports/ReportViewPage', [TENANT_ADMIN, 'report.read']),
    route('adminMenu.shops', '/admin/shops', 'tenant-admin/shops/ShopListPage', [TENANT_ADMIN, 'shops.read']),
    route('adminMenu.shops.create', '/admin/shops/create', 'tenant-admin/shops/ShopFormPage', [TENANT_ADMIN, 'shops.write']),
    route('adminMenu.shops.edit', '/admin/shops/:id/edit', 'tenant-admin/shops/ShopFormPage', [TENANT_ADMIN, 'shops.write']),
    route('adminMenu.shops.view', '/admin/shops/:id/view', 'tenant-admin/shops/ShopViewPage', [TENANT_ADMIN, 'shops.read']),
    route('adminMenu.shops.users', '/admin/shops/:id/users', 'tenant-admin/shops/ShopUsersPage', [TENANT_ADMIN]),
    route('adminMenu.shops.programs', '/admin/shops/:id/programs', 'tenant-admin/shops/ShopProgramsPage', [TENANT_ADMIN]),
    route('tenantportal.programs', '/tenantportal/programs', 'admin/programs/ProgramListPage', _CS),
    route('tenantportal.programs.add', '/tenantportal/programs/add', 'admin/programs/ProgramFormPage', [CS_ADMIN]),
    route('tenantportal.programs.edit', '/tenantportal/programs/edit/:programId', 'admin/programs/ProgramFormPage', [CS_ADMIN]),
    route('tenantportal.programs.details', '/tenantportal/programs/:programId/details', 'admin/programs/ProgramDetailsPage', [CS_ADMIN]),
    route('tenantportal.programs.assign-customers', '/tenantportal/programs/:programId/assign-customers', 'admin/programs/AssignCustomersPage', [CS_ADMIN]),
    route('tenantportal.programs.assignments', '/tenantportal/programs/:programId/assignments', 'admin/programs/ProgramAssignmentsPage', [CS_ADMIN]),
    route('tenantportal.programs.chartOfAccount', '/tenantportal/programs/:programId/chart-of-account', 'admin/programs/ProgramChartOfAccountPage', [TENANT_ADMIN]),
    route('tenantportal.program-types', '/tenantportal/program-types', 'admin/program-types/ProgramTypeListPage', [CS_ADMIN]),
    route('tenantportal.program-types.create', '/tenantportal/program-types/create', 'admin/program-types/ProgramTypeFormPage', [CS_ADMIN]),
    route('tenantportal.program-types.edit', '/tenantportal/program-types/edit/:id', 'admin/program-types/ProgramTypeFormPage', [CS_ADMIN]),
    route('tenantportal.program-categories', '/tenantportal/program-categories', 'admin/program-categories/ProgramCategoryListPage', _CS),
    route('tenantportal.program-categories.add', '/tenantportal/program-categories/add', 'admin/program-categories/ProgramCategoryFormPage', _CS),
    route('tenantportal.program-categories.edit', '/tenantportal/program-categories/edit/:id', 'admin/program-categories/ProgramCategoryFormPage', _CS),
    route('tenantportal.accounting.masterChartOfAccount', '/tenantportal/accounting/master-chart-of-account', 'accounting/MasterChartOfAccountPage', [TENANT_ADMIN, 'accounting.read']),
]
