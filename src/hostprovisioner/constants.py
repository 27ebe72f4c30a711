"""Fixed paths, package names and URLs used by the provisioning workflows."""

DIR_MODE = 0o755
FILE_MODE = 0o644

OS_RELEASE_PATH = "/etc/os-release"
DEFAULT_CONFIG_FILE = ".hostprovisioner.yml"

# MySQL
DEFAULT_ROOT_PASSWORD = "ChangeMeRoot@2025"
MYSQL_SERVICE = "mysqld"
MYSQL_PORT = 3306
MYSQL_REPO_PACKAGE = "mysql80-community-release"
MYSQL_REPO_RPM_URL = "https://dev.mysql.com/get/mysql80-community-release-el9-3.noarch.rpm"
MYSQL_REPO_ID = "mysql80-community"
MYSQL_LEGACY_REPO_IDS = ("mysql57-community", "mysql56-community")
MYSQL_GPG_KEY_URLS = (
    "https://repo.mysql.com/RPM-GPG-KEY-mysql-2023",
    "https://repo.mysql.com/RPM-GPG-KEY-mysql-2022",
    "https://repo.mysql.com/RPM-GPG-KEY-mysql",
)
MYSQL_SERVER_PACKAGE = "mysql-community-server"
MYSQL_PACKAGES = (
    "mysql-community-server",
    "mysql-community-client",
    "mysql-community-libs",
    "mysql-community-common",
    "mysql-community-client-plugins",
    "mysql-community-icu-data-files",
)
MYSQL_PACKAGE_PATTERN = "mysql-community"
MYSQL_PREREQUISITES = ("xz", "libaio", "openssl", "dnf-plugins-core")
YUM_REPOS_DIR = "/etc/yum.repos.d"
MYSQL_REPO_FILE_PATTERN = "mysql-community*.repo"
MYSQL_DATA_DIR = "/var/lib/mysql"
MYSQL_CONFIG_PATH = "/etc/my.cnf"
MYSQL_CONFIG_DIR = "/etc/my.cnf.d"
MYSQLD_LOG_PATH = "/var/log/mysqld.log"
MYSQL_SYSTEM_ACCOUNT = "mysql"
BACKUP_DIR = "/root"
LOOPBACK_ADDRESS = "127.0.0.1"
ALL_INTERFACES_ADDRESS = "0.0.0.0"
READINESS_RETRIES = 15
READINESS_INTERVAL_SECONDS = 2.0

# nginx
NGINX_SERVICE = "nginx"
NGINX_CUSTOM_DIR = "/opt/custom/nginx"
NGINX_INCLUDE_DROPIN = "/etc/nginx/conf.d/99-custom-include.conf"
NGINX_CONTENT_OWNER = "root:root"
NGINX_CONTENT_MODE = "0755"
NGINX_HTTP_SERVICES = ("http", "https")
SEMANAGE_PACKAGES = (
    "policycoreutils-python-utils",
    "policycoreutils-python",
    "policycoreutils",
)
HTTPD_CONTENT_TYPE = "httpd_sys_content_t"
